"""
Edit-time invariant maintenance.

Keeps the person set consistent when a single person is edited or deleted
interactively:

  - spousal symmetry: X.spouse == Y  =>  Y.spouse == X
  - at most one person references X as spouse
  - no self references, no duplicated parent slots
  - no dangling references after deletion (repair policy)

``check_invariants`` reports violations without changing anything.
"""

from __future__ import annotations

import copy
import enum
from dataclasses import dataclass
from typing import Dict, List, Optional

from family_graph.core.exceptions import PersonNotFoundError
from family_graph.logging import get_logger
from family_graph.registry.entities import REFERENCE_FIELDS, Person, PersonRegistry

log = get_logger("invariants")


# -----------------------------
# Violations
# -----------------------------

SELF_REFERENCE = "self_reference"
DANGLING_REFERENCE = "dangling_reference"
DUPLICATE_PARENT = "duplicate_parent"
ASYMMETRIC_SPOUSE = "asymmetric_spouse"
SHARED_SPOUSE = "shared_spouse"


@dataclass(frozen=True)
class InvariantViolation:
    kind: str
    person_id: str
    field: str
    value: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.kind}: {self.person_id}.{self.field} -> {self.value}"


def check_invariants(registry: PersonRegistry) -> List[InvariantViolation]:
    """Every consistency violation in ``registry``, in set order."""
    out: List[InvariantViolation] = []
    referrer_count: Dict[str, int] = {}

    for p in registry:
        for f in REFERENCE_FIELDS:
            ref = getattr(p, f)
            if not ref:
                continue
            if ref == p.id:
                out.append(InvariantViolation(SELF_REFERENCE, p.id, f, ref))
            elif ref not in registry:
                out.append(InvariantViolation(DANGLING_REFERENCE, p.id, f, ref))

        if p.parent_a and p.parent_a == p.parent_b:
            out.append(InvariantViolation(DUPLICATE_PARENT, p.id, "parent_b", p.parent_b))

        if p.spouse and p.spouse != p.id:
            referrer_count[p.spouse] = referrer_count.get(p.spouse, 0) + 1
            partner = registry.get(p.spouse)
            if partner is not None and partner.spouse != p.id:
                out.append(InvariantViolation(ASYMMETRIC_SPOUSE, p.id, "spouse", p.spouse))

    for pid, count in referrer_count.items():
        if count > 1:
            out.append(InvariantViolation(SHARED_SPOUSE, pid, "spouse", str(count)))

    return out


# -----------------------------
# In-place primitives
# -----------------------------

def scrub_person(person: Person) -> List[str]:
    """
    Drop self references and a duplicated parent slot on one person.
    Returns the names of the cleared fields.
    """
    cleared: List[str] = []
    for f in REFERENCE_FIELDS:
        if getattr(person, f) == person.id:
            setattr(person, f, None)
            cleared.append(f)
    if person.parent_a and person.parent_a == person.parent_b:
        person.parent_b = None
        cleared.append("parent_b")
    return cleared


def assign_spouse(registry: PersonRegistry, person_id: str, partner_id: str) -> List[str]:
    """
    Marry ``person_id`` and ``partner_id`` inside ``registry`` (in place).

    Assignment overwrites: anyone else pointing at either of the two loses
    that reference. Returns the ids whose spouse field changed.
    """
    if person_id == partner_id:
        raise ValueError(f"{person_id} cannot be their own spouse")
    person = registry.get(person_id)
    partner = registry.get(partner_id)
    if person is None:
        raise PersonNotFoundError(person_id)
    if partner is None:
        raise PersonNotFoundError(partner_id)

    changed: List[str] = []
    for p in registry:
        if p.id in (person_id, partner_id):
            continue
        if p.spouse in (person_id, partner_id):
            p.spouse = None
            changed.append(p.id)

    if person.spouse != partner_id:
        person.spouse = partner_id
        changed.append(person_id)
    if partner.spouse != person_id:
        partner.spouse = person_id
        changed.append(partner_id)
    return changed


def release_spouse(registry: PersonRegistry, person_id: str) -> List[str]:
    """Clear every spouse reference that points at ``person_id`` (in place)."""
    changed: List[str] = []
    for p in registry.referrers(person_id):
        p.spouse = None
        changed.append(p.id)
    return changed


# -----------------------------
# Interactive edits
# -----------------------------

def apply_edit(registry: PersonRegistry, edited: Person) -> PersonRegistry:
    """
    Replace a person with its edited version and restore spousal symmetry.

    * spouse set to Y: Y points back, and nobody else keeps pointing at the
      edited person or at Y.
    * spouse cleared: everyone pointing at the edited person is cleared.

    The edited person is normalized the way stored records are, and a
    spouse reference to an unknown id is dropped. Returns a new registry.
    """
    if edited.id not in registry:
        raise PersonNotFoundError(edited.id)

    out = registry.copy()
    person = copy.deepcopy(edited).normalize()
    for f in scrub_person(person):
        log.warning("Edit of %s: cleared invalid %s reference", person.id, f)

    if person.spouse and person.spouse not in out:
        log.warning("Edit of %s: spouse %s does not exist, dropping", person.id, person.spouse)
        person.spouse = None

    out.register(person)

    if person.spouse:
        changed = assign_spouse(out, person.id, person.spouse)
    else:
        changed = release_spouse(out, person.id)

    if changed:
        log.debug("Edit of %s touched spouse links of %s", person.id, changed)
    return out


# -----------------------------
# Deletion
# -----------------------------

class DeletionPolicy(enum.Enum):
    """
    What happens to references pointing at a deleted person.

    REPAIR clears them so every invariant still holds afterwards.
    LEGACY only removes the person, leaving dangling references for
    ``check_invariants`` to report and the layout builder to skip.
    """
    REPAIR = "repair"
    LEGACY = "legacy"


def remove_person(
    registry: PersonRegistry,
    person_id: str,
    policy: DeletionPolicy = DeletionPolicy.REPAIR,
) -> PersonRegistry:
    """Delete ``person_id`` and return the new registry."""
    if person_id not in registry:
        raise PersonNotFoundError(person_id)

    out = registry.copy()
    out.remove(person_id)

    if policy is DeletionPolicy.LEGACY:
        log.info("Deleted %s without reference repair", person_id)
        return out

    repaired = 0
    for p in out:
        for f in REFERENCE_FIELDS:
            if getattr(p, f) == person_id:
                setattr(p, f, None)
                repaired += 1
    log.info("Deleted %s, cleared %d reference(s)", person_id, repaired)
    return out
