"""
Relationship reconciliation for bulk imports.

Phase 1 applies the relationship facts named by candidate records (parents,
spouse) onto resolved people. Phase 2 propagates links that follow from the
structure of the graph until nothing changes:

  - reference hygiene: self, dangling and duplicated references are cleared
  - spousal symmetry: a one-sided marriage is mirrored; when a partner has
    chosen someone else, the losing reference is cleared
  - triangle completion: a child with one known parent gets that parent's
    spouse in the empty slot

Propagation is a work queue: only people affected by a change are revisited.
A step cap guarantees termination on malformed input.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, List, Optional, Sequence, Set, Tuple

from family_graph.extraction.models import CandidateRecord
from family_graph.logging import get_logger
from family_graph.registry.entities import (
    FEMALE,
    MALE,
    REFERENCE_FIELDS,
    Person,
    PersonRegistry,
)
from family_graph.registry.invariants import assign_spouse
from family_graph.resolution.matching import NameLookup
from family_graph.resolution.resolver import ResolutionResult

log = get_logger("reconcile")

MIN_STEP_CAP = 1000
STEPS_PER_PERSON = 50


@dataclass
class PropagationReport:
    registry: PersonRegistry
    changes: int = 0
    steps: int = 0
    capped: bool = False


@dataclass
class ReconcileResult:
    registry: PersonRegistry
    explicit_changes: int = 0
    inferred_changes: int = 0
    unresolved: List[str] = field(default_factory=list)
    steps: int = 0
    capped: bool = False


# ---------------------------------------------------------------------------
# Phase 1: explicit facts
# ---------------------------------------------------------------------------

def _set_slot(person: Person, slot: str, parent_id: str) -> bool:
    """Put ``parent_id`` in ``slot`` unless that would duplicate the other slot."""
    if parent_id == person.id or getattr(person, slot) == parent_id:
        return False
    other = "parent_b" if slot == "parent_a" else "parent_a"
    if getattr(person, other) == parent_id:
        return False
    setattr(person, slot, parent_id)
    return True


def _place_parent(person: Person, parent: Person) -> bool:
    """Slot A for a father, slot B for a mother, first free slot otherwise."""
    if parent.id == person.id or parent.id in person.parents:
        return False
    if parent.gender == MALE:
        return _set_slot(person, "parent_a", parent.id)
    if parent.gender == FEMALE:
        return _set_slot(person, "parent_b", parent.id)
    for slot in ("parent_a", "parent_b"):
        if not getattr(person, slot):
            return _set_slot(person, slot, parent.id)
    return False


def apply_explicit(
    registry: PersonRegistry,
    candidates: Sequence[CandidateRecord],
    lookup: NameLookup,
) -> Tuple[int, List[str]]:
    """
    Apply named relationships in place, in candidate order.

    Returns (number of changes, names that did not resolve). Unresolved
    names are dropped; no identifier is ever invented here.
    """
    changes = 0
    unresolved: List[str] = []

    def _resolve(name: str) -> Optional[Person]:
        person = registry.get(lookup.resolve(name))
        if person is None and name not in unresolved:
            unresolved.append(name)
            log.debug("Unresolved relationship name %r", name)
        return person

    for cand in candidates:
        person = registry.get(lookup.resolve(cand.name))
        if person is None:
            continue

        for name in cand.parent_names:
            parent = _resolve(name)
            if parent is not None and _place_parent(person, parent):
                changes += 1

        for slot, name in (("parent_a", cand.father_name), ("parent_b", cand.mother_name)):
            if not name:
                continue
            parent = _resolve(name)
            if parent is not None and _set_slot(person, slot, parent.id):
                changes += 1

        if cand.spouse_name:
            partner = _resolve(cand.spouse_name)
            if partner is not None and partner.id != person.id:
                changes += len(assign_spouse(registry, person.id, partner.id))

    return changes, unresolved


# ---------------------------------------------------------------------------
# Phase 2: propagation
# ---------------------------------------------------------------------------

def _step_cap(registry: PersonRegistry, max_steps: Optional[int]) -> int:
    if max_steps:
        return max_steps
    return max(MIN_STEP_CAP, STEPS_PER_PERSON * len(registry))


def _hygiene(registry: PersonRegistry, p: Person, affected: Set[str]) -> int:
    changes = 0
    for f in REFERENCE_FIELDS:
        ref = getattr(p, f)
        if ref and (ref == p.id or ref not in registry):
            log.warning("Clearing invalid %s reference %s on %s", f, ref, p.id)
            setattr(p, f, None)
            affected.update((p.id, ref))
            changes += 1
    if p.parent_a and p.parent_a == p.parent_b:
        p.parent_b = None
        affected.add(p.id)
        changes += 1
    return changes


def _spousal_symmetry(registry: PersonRegistry, p: Person, affected: Set[str]) -> int:
    changes = 0
    if p.spouse:
        partner = registry.get(p.spouse)
        if partner is not None:
            if partner.spouse is None:
                partner.spouse = p.id
                affected.update((partner.id, p.id))
                changes += 1
            elif partner.spouse != p.id:
                # The partner's own reference wins.
                affected.update((p.id, p.spouse))
                p.spouse = None
                changes += 1

    if p.spouse is None:
        referrers = registry.referrers(p.id)
        if referrers:
            p.spouse = referrers[0].id
            affected.update((p.id, p.spouse))
            changes += 1
    return changes


def _triangle(registry: PersonRegistry, p: Person, affected: Set[str]) -> int:
    filled = [slot for slot in ("parent_a", "parent_b") if getattr(p, slot)]
    if len(filled) != 1:
        return 0
    known = registry.get(getattr(p, filled[0]))
    if known is None or not known.spouse:
        return 0
    partner = registry.get(known.spouse)
    if partner is None or partner.spouse != known.id:
        return 0
    if partner.id in (p.id, known.id):
        return 0
    empty = "parent_b" if filled[0] == "parent_a" else "parent_a"
    setattr(p, empty, partner.id)
    affected.add(p.id)
    return 1


def _expand(registry: PersonRegistry, ids: Iterable[str]) -> List[str]:
    """People whose rules can read the fields of ``ids``."""
    out: List[str] = []
    for pid in ids:
        out.append(pid)
        person = registry.get(pid)
        if person is not None and person.spouse:
            out.append(person.spouse)
        out.extend(r.id for r in registry.referrers(pid))
        out.extend(c.id for c in registry.children_of(pid))
    return out


def propagate_in_place(registry: PersonRegistry, *, max_steps: Optional[int] = None) -> PropagationReport:
    """Run propagation to a fixed point (or the step cap) on ``registry`` itself."""
    queue: Deque[str] = deque(registry.ids())
    queued: Set[str] = set(queue)
    cap = _step_cap(registry, max_steps)
    report = PropagationReport(registry=registry)

    while queue:
        if report.steps >= cap:
            report.capped = True
            log.warning(
                "Propagation stopped at step cap %d with %d person(s) pending",
                cap, len(queue),
            )
            break

        pid = queue.popleft()
        queued.discard(pid)
        report.steps += 1

        person = registry.get(pid)
        if person is None:
            continue

        affected: Set[str] = set()
        report.changes += _hygiene(registry, person, affected)
        report.changes += _spousal_symmetry(registry, person, affected)
        report.changes += _triangle(registry, person, affected)

        for nxt in _expand(registry, affected):
            if nxt in registry and nxt not in queued:
                queue.append(nxt)
                queued.add(nxt)

    log.debug("Propagation: %d change(s) in %d step(s)", report.changes, report.steps)
    return report


def propagate(registry: PersonRegistry, *, max_steps: Optional[int] = None) -> PropagationReport:
    """Pure form of ``propagate_in_place``: the input registry is not modified."""
    return propagate_in_place(registry.copy(), max_steps=max_steps)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def reconcile(
    resolution: ResolutionResult,
    candidates: Sequence[CandidateRecord],
    *,
    max_steps: Optional[int] = None,
) -> ReconcileResult:
    """
    Apply the candidates' named relationships to a resolved set and propagate.

    ``resolution`` is the output of ``resolve_candidates`` for the same
    candidates; its registry is copied, never modified.
    """
    registry = resolution.registry.copy()
    explicit, unresolved = apply_explicit(registry, candidates, resolution.lookup)
    report = propagate_in_place(registry, max_steps=max_steps)

    log.info(
        "Reconciled %d candidate(s): explicit=%d inferred=%d unresolved=%d steps=%d",
        len(candidates), explicit, report.changes, len(unresolved), report.steps,
    )
    return ReconcileResult(
        registry=registry,
        explicit_changes=explicit,
        inferred_changes=report.changes,
        unresolved=unresolved,
        steps=report.steps,
        capped=report.capped,
    )
