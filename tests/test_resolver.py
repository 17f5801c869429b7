# tests/test_resolver.py

from __future__ import annotations

from family_graph.extraction.models import CandidateRecord
from family_graph.registry.entities import FEMALE, MALE, Person, PersonRegistry
from family_graph.resolution.matching import (
    ExactNameMatcher,
    FuzzyNameMatcher,
    NameLookup,
)
from family_graph.resolution.resolver import resolve_candidates


def _cands(*records):
    return [CandidateRecord.model_validate(r) for r in records]


def test_merge_existing_person_by_name():
    reg = PersonRegistry([Person("p1", "Li Hua", gender=FEMALE)])
    res = resolve_candidates(reg, _cands({"name": "Li Hua", "bio": "Teacher"}), batch_ms=1000)

    people = [p for p in res.registry if p.name == "Li Hua"]
    assert len(people) == 1
    assert people[0].bio == "Teacher"
    assert people[0].gender == FEMALE
    assert res.created == []
    assert res.updated == ["p1"]
    # Input untouched
    assert reg.get("p1").bio is None


def test_new_names_mint_batch_ids_with_default_gender():
    res = resolve_candidates(
        PersonRegistry(),
        _cands({"name": "Zhang San"}, {"name": "Wang Fang", "gender": "female"}),
        batch_ms=42,
    )

    assert res.created == ["ai-42-0", "ai-42-1"]
    assert res.registry.get("ai-42-0").gender == MALE
    assert res.registry.get("ai-42-1").gender == FEMALE
    assert res.lookup.resolve("Wang Fang") == "ai-42-1"


def test_merge_fills_only_empty_fields_and_appends_bio():
    reg = PersonRegistry([Person("p", "Old", birth_date="1900-01-01", bio="Farmer")])
    res = resolve_candidates(
        reg,
        _cands({"name": "Old", "birthDate": "1901", "deathDate": "1 JAN 1970", "bio": "Soldier"}),
        batch_ms=1,
    )
    p = res.registry.get("p")

    assert p.birth_date == "1900-01-01"
    assert p.death_date == "1970-01-01"
    assert p.bio == "Farmer\nSoldier"


def test_repeated_bio_is_not_duplicated():
    reg = PersonRegistry([Person("p", "Old", bio="Farmer")])
    res = resolve_candidates(reg, _cands({"name": "Old", "bio": "Farmer"}), batch_ms=1)

    assert res.registry.get("p").bio == "Farmer"
    assert res.updated == []


def test_duplicate_name_in_batch_merges_into_first():
    res = resolve_candidates(
        PersonRegistry(),
        _cands({"name": "Mei"}, {"name": "Mei", "gender": "female", "bio": "Nurse"}),
        batch_ms=5,
    )

    assert res.created == ["ai-5-0"]
    assert len(res.registry) == 1
    mei = res.registry.get("ai-5-0")
    # A defaulted gender can still be filled in by a later record
    assert mei.gender == FEMALE
    assert mei.bio == "Nurse"


def test_unreadable_dates_are_dropped():
    res = resolve_candidates(PersonRegistry(), _cands({"name": "Q", "birthDate": "long ago"}), batch_ms=1)
    assert res.registry.get("ai-1-0").birth_date is None


def test_batch_id_avoids_existing_ids():
    reg = PersonRegistry([Person("ai-9-0", "Earlier")])
    res = resolve_candidates(reg, _cands({"name": "Later"}), batch_ms=9)

    assert res.created == ["ai-9-0-1"]


def test_name_lookup_last_wins_for_duplicate_names():
    lookup = NameLookup.from_people([Person("a", "Sam"), Person("b", "Sam")])
    assert lookup.resolve("Sam") == "b"
    assert lookup.resolve(" Sam ") == "b"
    assert lookup.resolve("") is None


def test_exact_matcher_is_case_sensitive():
    lookup = NameLookup.from_people([Person("a", "Sam")], ExactNameMatcher())
    assert "sam" not in lookup
    assert "Sam" in lookup


def test_fuzzy_matcher_folds_case_and_spacing():
    lookup = NameLookup.from_people([Person("c", "Catherine Smith")], FuzzyNameMatcher(0.9))

    assert lookup.resolve("catherine  smith") == "c"
    assert lookup.resolve("Katherine Smith") == "c"
    assert lookup.resolve("John Smith") is None


def test_resolver_with_fuzzy_matcher_merges():
    reg = PersonRegistry([Person("c", "Catherine Smith", gender=FEMALE)])
    res = resolve_candidates(
        reg,
        _cands({"name": "catherine smith", "bio": "Painter"}),
        matcher=FuzzyNameMatcher(),
        batch_ms=1,
    )

    assert len(res.registry) == 1
    assert res.registry.get("c").bio == "Painter"
