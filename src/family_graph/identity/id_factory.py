# src/family_graph/identity/id_factory.py
from __future__ import annotations

import time
from typing import Container, Optional


# -----------------------------
# Clock
# -----------------------------

def current_millis() -> int:
    return int(time.time() * 1000)


# -----------------------------
# Identifier shapes
# -----------------------------

MEMBER_PREFIX = "m"
SELF_PREFIX = "m-self"
IMPORT_PREFIX = "ai"


def _dedupe(candidate: str, taken: Optional[Container[str]]) -> str:
    """
    Append ``-1``, ``-2``... until ``candidate`` is not in ``taken``.
    Two members created within the same millisecond must not collide.
    """
    if not taken or candidate not in taken:
        return candidate
    n = 1
    while f"{candidate}-{n}" in taken:
        n += 1
    return f"{candidate}-{n}"


def member_id(now_ms: Optional[int] = None, taken: Optional[Container[str]] = None) -> str:
    """Identifier for a manually added member: ``m-<millis>``."""
    ms = current_millis() if now_ms is None else now_ms
    return _dedupe(f"{MEMBER_PREFIX}-{ms}", taken)


def self_member_id(now_ms: Optional[int] = None, taken: Optional[Container[str]] = None) -> str:
    """Identifier for the self-initialized member: ``m-self-<millis>``."""
    ms = current_millis() if now_ms is None else now_ms
    return _dedupe(f"{SELF_PREFIX}-{ms}", taken)


def import_batch_id(
    batch_ms: int,
    ordinal: int,
    taken: Optional[Container[str]] = None,
) -> str:
    """
    Identifier for a person minted by an import batch: ``ai-<batch>-<ordinal>``.

    Batch timestamp plus ordinal is unique within the batch; ``taken`` guards
    against a replayed batch timestamp clashing with an earlier import.
    """
    if ordinal < 0:
        raise ValueError(f"Invalid ordinal: {ordinal!r}")
    return _dedupe(f"{IMPORT_PREFIX}-{batch_ms}-{ordinal}", taken)


__all__ = [
    "current_millis",
    "member_id",
    "self_member_id",
    "import_batch_id",
]
