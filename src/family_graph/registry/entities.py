from __future__ import annotations

import copy
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterator, List, Optional


# -----------------------------
# Gender
# -----------------------------

MALE = "male"
FEMALE = "female"
OTHER = "other"

GENDERS = (MALE, FEMALE, OTHER)


def normalize_gender(value: Any) -> Optional[str]:
    """
    Map free-form gender input onto ``male`` / ``female`` / ``other``.

    Returns None for anything unrecognised so callers can apply their own
    default instead of guessing.
    """
    if value is None:
        return None
    g = str(value).strip().lower()
    if not g:
        return None
    if g in GENDERS:
        return g
    if g in {"m", "man", "boy"}:
        return MALE
    if g in {"f", "w", "woman", "girl"}:
        return FEMALE
    return None


# -----------------------------
# Person
# -----------------------------

# Wire names used by stored and shared person lists.
_WIRE_NAMES = {
    "id": "id",
    "name": "name",
    "gender": "gender",
    "birth_date": "birthDate",
    "death_date": "deathDate",
    "photo": "photo",
    "bio": "bio",
    "parent_a": "parentId1",
    "parent_b": "parentId2",
    "spouse": "spouseId",
}

REFERENCE_FIELDS = ("parent_a", "parent_b", "spouse")
OPTIONAL_FIELDS = ("birth_date", "death_date", "photo", "bio")


@dataclass(slots=True)
class Person:
    """
    One individual in the family graph.

    ``parent_a`` / ``parent_b`` are the two parent slots; by convention a male
    parent sits in slot A and a female parent in slot B. ``spouse`` holds at
    most one partner.
    """
    id: str
    name: str
    gender: str = MALE
    birth_date: Optional[str] = None
    death_date: Optional[str] = None
    photo: Optional[str] = None
    bio: Optional[str] = None
    parent_a: Optional[str] = None
    parent_b: Optional[str] = None
    spouse: Optional[str] = None

    @property
    def parents(self) -> List[str]:
        return [p for p in (self.parent_a, self.parent_b) if p]

    def references(self) -> Dict[str, Optional[str]]:
        return {f: getattr(self, f) for f in REFERENCE_FIELDS}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with wire names, dropping empty fields."""
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            out[_WIRE_NAMES[f.name]] = value
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Person":
        """
        Build a Person from a wire-format dict.

        Accepts wire names (``parentId1``) and attribute names (``parent_a``).
        Empty strings are read as missing references.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected dict, got {type(data).__name__}")

        values: Dict[str, Any] = {}
        for attr, wire in _WIRE_NAMES.items():
            if wire in data:
                values[attr] = data[wire]
            elif attr in data:
                values[attr] = data[attr]

        if not values.get("id"):
            raise ValueError("Person record is missing 'id'")
        values["id"] = str(values["id"])
        values.setdefault("name", "")
        return cls(**values).normalize()

    def normalize(self) -> "Person":
        """
        Put fields into their stored form, in place: trimmed name, a known
        gender, None for empty optional fields and string references.

        Stored and shared sets only ever hold normalized people, so a
        ``to_dict`` / ``from_dict`` round trip is exact.
        """
        self.name = str(self.name or "").strip()
        self.gender = normalize_gender(self.gender) or MALE
        for attr in OPTIONAL_FIELDS + REFERENCE_FIELDS:
            value = getattr(self, attr)
            if value in ("", None):
                setattr(self, attr, None)
            elif attr in REFERENCE_FIELDS:
                setattr(self, attr, str(value))
        return self


# -----------------------------
# Registry
# -----------------------------

class PersonRegistry:
    """
    In-memory canonical person set indexed by identifier.

    Iteration follows insertion order. Every "first match" rule in the engine
    and the sibling order in layouts depend on that order.
    """

    __slots__ = ("_people",)

    def __init__(self, people: Optional[Iterator[Person]] = None):
        self._people: Dict[str, Person] = {}
        for p in people or ():
            self.register(p)

    # container protocol

    def __iter__(self) -> Iterator[Person]:
        return iter(list(self._people.values()))

    def __len__(self) -> int:
        return len(self._people)

    def __contains__(self, person_id: object) -> bool:
        return person_id in self._people

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PersonRegistry):
            return NotImplemented
        return list(self._people.items()) == list(other._people.items())

    def __repr__(self) -> str:
        return f"PersonRegistry({len(self._people)} people)"

    # mutation

    def register(self, person: Person) -> None:
        """Insert or replace (keeping the original position) a person."""
        self._people[person.id] = person

    def remove(self, person_id: str) -> Optional[Person]:
        return self._people.pop(person_id, None)

    # lookup

    def get(self, person_id: Optional[str]) -> Optional[Person]:
        if not person_id:
            return None
        return self._people.get(person_id)

    def ids(self) -> List[str]:
        return list(self._people.keys())

    def by_name(self, name: str) -> Optional[Person]:
        """First person whose trimmed name equals ``name`` trimmed."""
        wanted = (name or "").strip()
        for p in self._people.values():
            if p.name.strip() == wanted:
                return p
        return None

    def referrers(self, person_id: str) -> List[Person]:
        """People whose spouse reference points at ``person_id``."""
        return [p for p in self._people.values() if p.spouse == person_id and p.id != person_id]

    def children_of(self, person_id: str) -> List[Person]:
        return [
            p for p in self._people.values()
            if person_id in (p.parent_a, p.parent_b)
        ]

    # snapshots / serialization

    def copy(self) -> "PersonRegistry":
        """Deep snapshot; components never mutate the caller's set."""
        return PersonRegistry(copy.deepcopy(p) for p in self._people.values())

    def to_list(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self._people.values()]

    @classmethod
    def from_list(cls, records: List[Dict[str, Any]]) -> "PersonRegistry":
        return cls(Person.from_dict(r) for r in records)
