"""
Name matching strategies.

Identity across an import is decided by display name. Everything that turns a
name into an identifier goes through a ``NameMatcher`` so the strategy can be
swapped without touching reconciliation or invariant maintenance.
"""

from __future__ import annotations

import difflib
import re
from typing import Dict, Iterable, Mapping, Optional, Protocol

from family_graph.registry.entities import Person

DEFAULT_FUZZY_THRESHOLD = 0.92


class NameMatcher(Protocol):
    def key(self, name: str) -> str:
        """Lookup key for a display name; empty means unusable."""
        ...

    def find(self, name: str, lookup: Mapping[str, str]) -> Optional[str]:
        """Identifier matching ``name`` in ``lookup`` (key -> id), if any."""
        ...


class ExactNameMatcher:
    """Case- and whitespace-sensitive match after trimming both ends."""

    def key(self, name: str) -> str:
        return (name or "").strip()

    def find(self, name: str, lookup: Mapping[str, str]) -> Optional[str]:
        k = self.key(name)
        return lookup.get(k) if k else None


def _fold(name: str) -> str:
    return re.sub(r"\s+", " ", name).strip().casefold()


class FuzzyNameMatcher(ExactNameMatcher):
    """
    Exact match first, then the closest folded name whose
    ``difflib.SequenceMatcher`` ratio reaches ``threshold``.
    """

    def __init__(self, threshold: float = DEFAULT_FUZZY_THRESHOLD):
        if not 0.0 < threshold <= 1.0:
            raise ValueError(f"threshold must be in (0, 1], got {threshold!r}")
        self.threshold = threshold

    def find(self, name: str, lookup: Mapping[str, str]) -> Optional[str]:
        hit = super().find(name, lookup)
        if hit is not None:
            return hit

        wanted = _fold(name or "")
        if not wanted:
            return None

        best_id: Optional[str] = None
        best_score = 0.0
        for key, pid in lookup.items():
            score = difflib.SequenceMatcher(None, wanted, _fold(key)).ratio()
            if score >= self.threshold and score > best_score:
                best_id, best_score = pid, score
        return best_id


class NameLookup:
    """name -> identifier map bound to a matching strategy."""

    def __init__(self, matcher: Optional[NameMatcher] = None):
        self.matcher: NameMatcher = matcher or ExactNameMatcher()
        self._ids: Dict[str, str] = {}

    @classmethod
    def from_people(cls, people: Iterable[Person], matcher: Optional[NameMatcher] = None) -> "NameLookup":
        lookup = cls(matcher)
        for p in people:
            # Later people with the same name take the key over.
            lookup.add(p.name, p.id)
        return lookup

    def add(self, name: str, person_id: str) -> None:
        key = self.matcher.key(name)
        if key:
            self._ids[key] = person_id

    def resolve(self, name: Optional[str]) -> Optional[str]:
        if not name:
            return None
        return self.matcher.find(name, self._ids)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._ids)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) is not None

    def __len__(self) -> int:
        return len(self._ids)


def matcher_from_config(cfg) -> NameMatcher:
    section = cfg.reconcile
    kind = str(section.get("matcher", "exact")).lower()
    if kind == "fuzzy":
        return FuzzyNameMatcher(float(section.get("fuzzy_threshold", DEFAULT_FUZZY_THRESHOLD)))
    if kind != "exact":
        raise ValueError(f"Unknown matcher in config: {kind!r}")
    return ExactNameMatcher()
