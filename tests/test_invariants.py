# tests/test_invariants.py

from __future__ import annotations

import pytest

from family_graph.core.exceptions import PersonNotFoundError
from family_graph.registry.entities import FEMALE, Person, PersonRegistry
from family_graph.registry.invariants import (
    ASYMMETRIC_SPOUSE,
    DANGLING_REFERENCE,
    DUPLICATE_PARENT,
    SELF_REFERENCE,
    SHARED_SPOUSE,
    DeletionPolicy,
    apply_edit,
    assign_spouse,
    check_invariants,
    remove_person,
)


def _couple_and_child() -> PersonRegistry:
    return PersonRegistry(
        [
            Person("a", "A", spouse="b"),
            Person("b", "B", gender=FEMALE, spouse="a"),
            Person("c", "C"),
            Person("k", "Kid", parent_a="a", parent_b="b"),
        ]
    )


def test_consistent_set_has_no_violations():
    assert check_invariants(_couple_and_child()) == []


def test_check_invariants_reports_each_kind():
    reg = PersonRegistry(
        [
            Person("s", "Self", spouse="s"),
            Person("d", "Dangling", parent_a="gone"),
            Person("p", "DupParents", parent_a="x", parent_b="x"),
            Person("x", "X"),
            Person("y", "Y", spouse="x"),
            Person("z", "Z", spouse="x"),
        ]
    )
    kinds = {v.kind for v in check_invariants(reg)}

    assert kinds == {SELF_REFERENCE, DANGLING_REFERENCE, DUPLICATE_PARENT, ASYMMETRIC_SPOUSE, SHARED_SPOUSE}


def test_assign_spouse_overwrites_previous_partners():
    reg = _couple_and_child()
    changed = assign_spouse(reg, "c", "b")

    assert reg.get("c").spouse == "b"
    assert reg.get("b").spouse == "c"
    assert reg.get("a").spouse is None
    assert set(changed) == {"a", "b", "c"}
    assert check_invariants(reg) == []


def test_assign_spouse_rejects_self_and_unknown():
    reg = _couple_and_child()
    with pytest.raises(ValueError):
        assign_spouse(reg, "a", "a")
    with pytest.raises(PersonNotFoundError):
        assign_spouse(reg, "a", "nope")


def test_apply_edit_mirrors_new_spouse_and_clears_old_partner():
    reg = _couple_and_child()
    edited = Person("c", "C", spouse="a")
    out = apply_edit(reg, edited)

    assert out.get("a").spouse == "c"
    assert out.get("b").spouse is None
    assert check_invariants(out) == []
    # Input untouched
    assert reg.get("a").spouse == "b"


def test_apply_edit_clearing_spouse_clears_partner():
    reg = _couple_and_child()
    out = apply_edit(reg, Person("a", "A", spouse=None))

    assert out.get("b").spouse is None
    assert check_invariants(out) == []


def test_apply_edit_drops_self_and_unknown_references():
    reg = _couple_and_child()
    out = apply_edit(reg, Person("c", "C", parent_a="c", spouse="ghost"))

    assert out.get("c").parent_a is None
    assert out.get("c").spouse is None


def test_apply_edit_unknown_person():
    with pytest.raises(PersonNotFoundError):
        apply_edit(_couple_and_child(), Person("zz", "Nobody"))


def test_remove_person_repairs_references():
    out = remove_person(_couple_and_child(), "a")

    assert "a" not in out
    assert out.get("b").spouse is None
    assert out.get("k").parent_a is None
    assert out.get("k").parent_b == "b"
    assert check_invariants(out) == []


def test_remove_person_legacy_leaves_dangling_references():
    out = remove_person(_couple_and_child(), "a", DeletionPolicy.LEGACY)

    assert out.get("b").spouse == "a"
    kinds = {v.kind for v in check_invariants(out)}
    assert kinds == {DANGLING_REFERENCE}


def test_remove_unknown_person():
    with pytest.raises(PersonNotFoundError):
        remove_person(_couple_and_child(), "missing")


def test_apply_edit_stores_the_normalized_person():
    out = apply_edit(_couple_and_child(), Person("c", "  C  ", gender="F", bio="", death_date="", parent_b=""))
    c = out.get("c")

    assert c.name == "C"
    assert c.gender == FEMALE
    assert c.bio is None
    assert c.death_date is None
    assert c.parent_b is None
