# tests/test_state.py

from __future__ import annotations

from dataclasses import replace

import pytest

from family_graph.config import CONFIG_ENV_VAR, reset_config
from family_graph.core.exceptions import PersonNotFoundError
from family_graph.core.state import TreeState
from family_graph.registry.entities import MALE, Person, PersonRegistry
from family_graph.registry.invariants import DeletionPolicy, check_invariants


def test_add_member_defaults():
    state = TreeState()
    p = state.add_member(now_ms=10)

    assert p.id == "m-10"
    assert p.name == "New Member"
    assert p.gender == MALE
    assert state.get("m-10") == p


def test_add_member_same_millisecond_gets_unique_id():
    state = TreeState()
    a = state.add_member("A", now_ms=10)
    b = state.add_member("B", now_ms=10)

    assert a.id != b.id
    assert len(state.registry) == 2


def test_add_member_rejects_blank_name():
    with pytest.raises(ValueError):
        TreeState().add_member("   ")


def test_create_self_replaces_set():
    state = TreeState(registry=PersonRegistry([Person("old", "Old")]))
    me = state.create_self("Me", now_ms=5)

    assert me.id == "m-self-5"
    assert me.bio == "This is me."
    assert state.registry.ids() == ["m-self-5"]
    assert state.me() == me


def test_update_member_keeps_spouses_symmetric():
    state = TreeState()
    a = state.add_member("A", now_ms=1)
    b = state.add_member("B", now_ms=2)

    state.update_member(replace(state.get(a.id), spouse=b.id))

    assert state.get(b.id).spouse == a.id
    assert check_invariants(state.registry) == []


def test_update_unknown_member():
    with pytest.raises(PersonNotFoundError):
        TreeState().update_member(Person("zz", "Z"))


def test_snapshots_do_not_change_after_edits():
    state = TreeState()
    a = state.add_member("A", now_ms=1)
    snapshot = state.registry

    state.delete_member(a.id)

    assert a.id in snapshot
    assert a.id not in state.registry


def test_delete_member_policies():
    people = [Person("a", "A", spouse="b"), Person("b", "B", spouse="a")]

    repaired = TreeState(registry=PersonRegistry(people))
    repaired.delete_member("a")
    assert repaired.get("b").spouse is None

    legacy = TreeState(registry=PersonRegistry(people), deletion_policy=DeletionPolicy.LEGACY)
    legacy.delete_member("a")
    assert legacy.get("b").spouse == "a"


def test_deleting_me_clears_marker():
    state = TreeState()
    me = state.create_self("Me", now_ms=3)
    state.delete_member(me.id)

    assert state.me_id is None
    assert state.me() is None


def test_state_layout_never_raises():
    state = TreeState(registry=PersonRegistry([Person("a", "A", parent_a="b"), Person("b", "B", parent_a="a")]))
    assert state.layout().is_empty


def test_state_layout_uses_configured_node_size(tmp_path, monkeypatch):
    path = tmp_path / "layout.yml"
    path.write_text("layout:\n  node_width: 100\n  level_height: 50\n  sibling_separation: 1\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    reset_config()

    state = TreeState(
        registry=PersonRegistry([Person("p", "P"), Person("a", "A", parent_a="p"), Person("b", "B", parent_a="p")])
    )
    layout = state.layout()

    assert layout.node("b").x - layout.node("a").x == 100.0
    assert layout.node("a").y == 100.0
