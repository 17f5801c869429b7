# tests/test_pipeline.py

from __future__ import annotations

import asyncio

import pytest

from family_graph.config import FGConfig
from family_graph.core.context import ImportContext
from family_graph.core.exceptions import ExtractionError, ReadOnlyStateError
from family_graph.core.pipeline import ImportPipeline
from family_graph.core.state import TreeState
from family_graph.extraction.client import StaticExtractor, parse_candidates
from family_graph.logging import get_logger
from family_graph.persistence.repository import InMemoryRepository
from family_graph.registry.entities import FEMALE, Person, PersonRegistry
from family_graph.registry.invariants import check_invariants


class FailingExtractor:
    async def extract(self, text, context=()):
        raise ExtractionError("service unavailable")


class CancelledExtractor:
    async def extract(self, text, context=()):
        raise asyncio.CancelledError()


class EditingExtractor:
    """Edits the state while the extraction is in flight."""

    def __init__(self, state, payload):
        self.state = state
        self.payload = payload

    async def extract(self, text, context=()):
        self.state.add_member("Late Edit", now_ms=1)
        return parse_candidates(self.payload)


def _pipeline(extractor, repository=None, config=None):
    ctx = ImportContext(
        config=config or FGConfig({}),
        logger=get_logger("tests.pipeline"),
        extractor=extractor,
        repository=repository,
    )
    return ImportPipeline(ctx), ctx


def _state():
    return TreeState(registry=PersonRegistry([Person("p1", "Li Hua", gender=FEMALE)]))


def test_import_merges_links_and_saves():
    repo = InMemoryRepository()
    payload = [
        {"name": "Li Hua", "bio": "Teacher", "spouseName": "Zhang Wei"},
        {"name": "Zhang Wei"},
        {"name": "Xiao Ming", "parentNames": ["Zhang Wei"]},
    ]
    pipeline, ctx = _pipeline(StaticExtractor(payload), repo)
    state = _state()

    outcome = pipeline.run_sync(state, "some text")
    reg = state.registry
    zhang = reg.by_name("Zhang Wei")
    ming = reg.by_name("Xiao Ming")

    assert outcome.applied
    assert outcome.candidates == 3
    assert len(outcome.created) == 2
    assert outcome.updated == ["p1"]
    assert reg.get("p1").bio == "Teacher"
    assert reg.get("p1").spouse == zhang.id
    assert ming.parent_a == zhang.id
    assert ming.parent_b == "p1"
    assert check_invariants(reg) == []
    assert repo.saves == 1
    assert repo.load() == reg
    assert ctx.stats["created"] == 2


def test_failed_extraction_leaves_state_untouched():
    repo = InMemoryRepository()
    pipeline, ctx = _pipeline(FailingExtractor(), repo)
    state = _state()
    before = state.registry.copy()

    outcome = pipeline.run_sync(state, "text")

    assert not outcome.applied
    assert state.registry == before
    assert repo.saves == 0
    assert ctx.errors == ["service unavailable"]


def test_empty_extraction_is_a_no_op():
    pipeline, _ = _pipeline(StaticExtractor("no json here"))
    state = _state()
    before = state.registry

    outcome = pipeline.run_sync(state, "text")

    assert not outcome.applied
    assert state.registry is before


def test_cancelled_extraction_propagates_and_leaves_state():
    pipeline, _ = _pipeline(CancelledExtractor())
    state = _state()
    before = state.registry.copy()

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(pipeline.run(state, "text"))
    assert state.registry == before


def test_edits_made_during_extraction_are_kept():
    state = _state()
    pipeline, _ = _pipeline(EditingExtractor(state, [{"name": "Newcomer"}]))

    pipeline.run_sync(state, "text")

    names = {p.name for p in state.registry}
    assert names == {"Li Hua", "Late Edit", "Newcomer"}


def test_import_into_shared_view_is_refused():
    state = _state()
    state.read_only = True
    pipeline, _ = _pipeline(StaticExtractor([{"name": "X"}]))

    with pytest.raises(ReadOnlyStateError):
        pipeline.run_sync(state, "text")


def test_fuzzy_matcher_from_config():
    cfg = FGConfig({"reconcile": {"matcher": "fuzzy", "fuzzy_threshold": 0.8}})
    pipeline, _ = _pipeline(StaticExtractor([{"name": "li hua", "bio": "Retired"}]), config=cfg)
    state = _state()

    pipeline.run_sync(state, "text")

    assert len(state.registry) == 1
    assert state.registry.get("p1").bio == "Retired"


def test_one_malformed_candidate_does_not_drop_the_batch():
    payload = '[{"name": "Good One"}, {"name": "Bad One", "parentNames": 5}]'
    pipeline, ctx = _pipeline(StaticExtractor(payload))
    state = _state()

    outcome = pipeline.run_sync(state, "text")

    assert outcome.applied
    assert outcome.candidates == 1
    assert state.registry.by_name("Good One") is not None
    assert state.registry.by_name("Bad One") is None
    assert ctx.errors == []
