from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import List

from family_graph.core.context import ImportContext
from family_graph.core.exceptions import ExtractionError, ReadOnlyStateError
from family_graph.core.state import TreeState
from family_graph.extraction.client import extraction_context
from family_graph.extraction.models import CandidateRecord
from family_graph.registry.reconcile import reconcile
from family_graph.resolution.matching import matcher_from_config
from family_graph.resolution.resolver import DEFAULT_BIO_SEPARATOR, resolve_candidates


@dataclass
class ImportOutcome:
    candidates: int = 0
    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)
    explicit_changes: int = 0
    inferred_changes: int = 0
    applied: bool = False


class ImportPipeline:
    """
    Orchestrates extraction -> resolution -> reconciliation.
    No business logic lives here.

    The state is only replaced once a complete batch has reconciled; a failed,
    empty or cancelled extraction leaves it untouched.
    """

    def __init__(self, context: ImportContext):
        self.ctx = context
        self.log = context.logger

    async def _extract(self, state: TreeState, text: str) -> List[CandidateRecord]:
        try:
            return await self.ctx.extractor.extract(text, extraction_context(state.registry))
        except ExtractionError as exc:
            self.log.warning("Extraction failed: %s", exc)
            self.ctx.errors.append(str(exc))
        except asyncio.CancelledError:
            self.log.info("Extraction cancelled, state untouched")
            raise
        except Exception as exc:
            self.log.exception("Extractor raised unexpectedly")
            self.ctx.errors.append(f"{type(exc).__name__}: {exc}")
        return []

    async def run(self, state: TreeState, text: str) -> ImportOutcome:
        if state.read_only:
            raise ReadOnlyStateError("Cannot import into a shared tree")
        self.log.info("Import starting")

        candidates = await self._extract(state, text)
        outcome = ImportOutcome(candidates=len(candidates))
        self.ctx.stats["candidates"] = len(candidates)
        if not candidates:
            self.log.info("No candidates produced, nothing to apply")
            return outcome

        section = self.ctx.config.reconcile
        matcher = self.ctx.matcher or matcher_from_config(self.ctx.config)

        # Resolve against the state as it is now, not as it was when the
        # extraction started: edits made while waiting are kept.
        resolution = resolve_candidates(
            state.registry,
            candidates,
            matcher=matcher,
            bio_separator=section.get("bio_separator", DEFAULT_BIO_SEPARATOR),
        )
        result = reconcile(
            resolution,
            candidates,
            max_steps=int(section.get("max_steps", 0)) or None,
        )

        state.replace(result.registry)
        if self.ctx.repository is not None:
            self.ctx.repository.save(state.registry)

        outcome.created = resolution.created
        outcome.updated = resolution.updated
        outcome.unresolved = result.unresolved
        outcome.explicit_changes = result.explicit_changes
        outcome.inferred_changes = result.inferred_changes
        outcome.applied = True
        self.ctx.stats.update(
            created=len(outcome.created),
            updated=len(outcome.updated),
            unresolved=len(outcome.unresolved),
        )

        self.log.info("Import completed successfully")
        return outcome

    def run_sync(self, state: TreeState, text: str) -> ImportOutcome:
        return asyncio.run(self.run(state, text))
