# tests/test_share.py

from __future__ import annotations

import base64

import pytest

from family_graph.core.exceptions import ReadOnlyStateError, ShareDecodeError
from family_graph.core.state import TreeState
from family_graph.persistence.share import (
    build_share_link,
    decode_share,
    encode_share,
    token_from_link,
)
from family_graph.registry.entities import FEMALE, Person, PersonRegistry


def _family() -> PersonRegistry:
    return PersonRegistry(
        [
            Person("m-1", "Wang Lei", spouse="m-2", birth_date="1960-05-01"),
            Person("m-2", "Chen Jing", gender=FEMALE, spouse="m-1", bio="Engineer\nRetired"),
            Person("ai-9-0", "Wang Xiaoyu", parent_a="m-1", parent_b="m-2", photo="data:image/png;base64,AAAA"),
        ]
    )


def test_share_round_trip_preserves_everything():
    reg = _family()
    out = decode_share(encode_share(reg))

    assert out == reg
    assert out.ids() == reg.ids()


def test_share_token_is_url_safe():
    token = encode_share(_family())
    assert "=" not in token
    assert "+" not in token and "/" not in token


def test_share_link_round_trip_keeps_other_params():
    link = build_share_link("https://example.org/view?lang=en", _family())

    assert link.startswith("https://example.org/view?")
    assert "lang=en" in link
    assert decode_share(token_from_link(link)) == _family()


def test_link_without_token():
    with pytest.raises(ShareDecodeError):
        token_from_link("https://example.org/view?lang=en")


@pytest.mark.parametrize("token", ["", "   ", "!!!!", "bm90IGpzb24"])
def test_bad_tokens_raise(token):
    with pytest.raises(ShareDecodeError):
        decode_share(token)


def test_non_list_payload_raises():
    token = base64.urlsafe_b64encode(b'{"id": "x"}').decode("ascii")
    with pytest.raises(ShareDecodeError):
        decode_share(token)


def test_shared_state_is_read_only():
    state = TreeState.from_share(encode_share(_family()))

    assert state.read_only
    assert len(state.registry) == 3
    with pytest.raises(ReadOnlyStateError):
        state.add_member("Intruder")
    with pytest.raises(ReadOnlyStateError):
        state.delete_member("m-1")


def test_round_trip_after_interactive_edit():
    state = TreeState()
    bob = state.add_member("Bob", now_ms=1)
    ann = state.add_member("Ann", now_ms=2)
    state.update_member(
        Person(bob.id, name="  Bob  ", bio="", photo="", birth_date="", parent_a="", spouse=ann.id)
    )

    stored = state.get(bob.id)
    assert stored.name == "Bob"
    assert stored.bio is None and stored.photo is None and stored.birth_date is None
    assert stored.parent_a is None
    assert decode_share(encode_share(state.registry)) == state.registry
