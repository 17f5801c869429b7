"""
Persistence collaborators.

The engine only ever sees ``PersonRegistry`` snapshots; where they live is
decided by whichever ``Repository`` the caller injects.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Protocol

from family_graph.logging import get_logger
from family_graph.registry.entities import PersonRegistry

log = get_logger("repository")


class Repository(Protocol):
    def load(self) -> PersonRegistry:
        """Last stored set, or an empty set when nothing was stored."""
        ...

    def save(self, registry: PersonRegistry) -> None:
        ...


class InMemoryRepository:
    """Keeps the last saved snapshot in memory."""

    def __init__(self, registry: Optional[PersonRegistry] = None):
        self._stored = registry.copy() if registry is not None else None
        self.saves = 0

    def load(self) -> PersonRegistry:
        return self._stored.copy() if self._stored is not None else PersonRegistry()

    def save(self, registry: PersonRegistry) -> None:
        self._stored = registry.copy()
        self.saves += 1


def _records_from(data: Any) -> list:
    if isinstance(data, dict):
        data = data.get("members", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of person records, got {type(data).__name__}")
    return data


class JsonFileRepository:
    """
    JSON file holding the person list.

    Writes go to a temporary file in the same directory and are moved into
    place, so a crash mid-write leaves the previous file intact.
    """

    def __init__(self, path: str | Path, indent: Optional[int] = 2):
        self.path = Path(path)
        self.indent = indent

    @classmethod
    def from_config(cls, cfg) -> "JsonFileRepository":
        return cls(cfg.paths.get("store", "data/family_tree.json"))

    def load(self) -> PersonRegistry:
        if not self.path.exists():
            log.info("No store at %s, starting empty", self.path)
            return PersonRegistry()

        with self.path.open("r", encoding="utf-8") as f:
            text = f.read()
        if not text.strip():
            return PersonRegistry()

        registry = PersonRegistry.from_list(_records_from(json.loads(text)))
        log.info("Loaded %d person(s) from %s", len(registry), self.path)
        return registry

    def save(self, registry: PersonRegistry) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(registry.to_list(), indent=self.indent, ensure_ascii=False)

        fd, tmp = tempfile.mkstemp(prefix=".family_graph-", suffix=".json", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

        log.info("Saved %d person(s) to %s", len(registry), self.path)
