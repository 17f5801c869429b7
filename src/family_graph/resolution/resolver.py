"""
Entity resolution for bulk imports.

Decides, per candidate record, whether it describes a new person or an
update to someone already in the set. Resolution never deletes and never
touches relationship fields; those are applied by the reconciler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

from family_graph.dates.normalizer import normalize_date
from family_graph.extraction.models import CandidateRecord
from family_graph.identity.id_factory import current_millis, import_batch_id
from family_graph.logging import get_logger
from family_graph.registry.entities import MALE, Person, PersonRegistry
from family_graph.resolution.matching import NameLookup, NameMatcher

log = get_logger("resolution")

DEFAULT_BIO_SEPARATOR = "\n"


@dataclass
class ResolutionResult:
    registry: PersonRegistry
    lookup: NameLookup
    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)


def _append_bio(existing: Optional[str], addition: Optional[str], separator: str) -> Optional[str]:
    if not addition:
        return existing
    if not existing:
        return addition
    if addition in existing:
        return existing
    return f"{existing}{separator}{addition}"


def _merge_into(
    person: Person,
    cand: CandidateRecord,
    *,
    gender_defaulted: bool,
    bio_separator: str,
) -> bool:
    """Fill-if-empty merge of non-relationship fields. Returns True on change."""
    changed = False

    if cand.gender and (gender_defaulted or not person.gender) and person.gender != cand.gender:
        person.gender = cand.gender
        changed = True

    for attr, value in (
        ("birth_date", normalize_date(cand.birth_date)),
        ("death_date", normalize_date(cand.death_date)),
        ("photo", cand.photo),
    ):
        if value and not getattr(person, attr):
            setattr(person, attr, value)
            changed = True

    bio = _append_bio(person.bio, cand.bio, bio_separator)
    if bio != person.bio:
        person.bio = bio
        changed = True

    return changed


def resolve_candidates(
    registry: PersonRegistry,
    candidates: Sequence[CandidateRecord],
    *,
    matcher: Optional[NameMatcher] = None,
    batch_ms: Optional[int] = None,
    bio_separator: str = DEFAULT_BIO_SEPARATOR,
) -> ResolutionResult:
    """
    Match ``candidates`` against ``registry`` by name.

    Unmatched names mint ``ai-<batch>-<ordinal>`` people (gender defaults to
    male when the record has none). Matched names merge: gender, dates and
    photo only fill empty fields, biography text is appended. A name seen
    twice in one batch resolves to the person the first occurrence created.

    The input registry is left untouched; the result holds a new snapshot.
    """
    out = registry.copy()
    lookup = NameLookup.from_people(out, matcher)
    batch = current_millis() if batch_ms is None else batch_ms

    created: List[str] = []
    updated: List[str] = []
    # People minted here whose gender is still the documented default.
    defaulted: Set[str] = set()

    for ordinal, cand in enumerate(candidates):
        name = cand.name.strip()
        if not name:
            continue

        pid = lookup.resolve(name)
        if pid is None:
            pid = import_batch_id(batch, ordinal, taken=out)
            out.register(
                Person(
                    id=pid,
                    name=name,
                    gender=cand.gender or MALE,
                    birth_date=normalize_date(cand.birth_date),
                    death_date=normalize_date(cand.death_date),
                    photo=cand.photo,
                    bio=cand.bio,
                )
            )
            if not cand.gender:
                defaulted.add(pid)
            lookup.add(name, pid)
            created.append(pid)
            log.debug("Created %s for candidate %r", pid, name)
            continue

        person = out.get(pid)
        if person is None:
            continue
        if _merge_into(person, cand, gender_defaulted=pid in defaulted, bio_separator=bio_separator):
            if cand.gender:
                defaulted.discard(pid)
            if pid not in created and pid not in updated:
                updated.append(pid)
            log.debug("Merged candidate %r into %s", name, pid)

    log.info(
        "Resolved %d candidate(s): created=%d updated=%d",
        len(candidates), len(created), len(updated),
    )
    return ResolutionResult(registry=out, lookup=lookup, created=created, updated=updated)
