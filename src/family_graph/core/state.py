from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Optional

from family_graph.config import get_config
from family_graph.core.exceptions import PersonNotFoundError, ReadOnlyStateError
from family_graph.identity.id_factory import member_id, self_member_id
from family_graph.layout.builder import LayoutOptions, TreeLayout, safe_build_layout
from family_graph.logging import get_logger
from family_graph.persistence.share import decode_share
from family_graph.registry.entities import MALE, Person, PersonRegistry
from family_graph.registry.invariants import DeletionPolicy, apply_edit, remove_person

log = get_logger("state")

DEFAULT_MEMBER_NAME = "New Member"
DEFAULT_SELF_BIO = "This is me."


@dataclass
class TreeState:
    """
    Caller-owned application state: the canonical person set plus the "me"
    marker.

    Every mutation swaps ``registry`` for a new snapshot produced by the
    engine, so layouts and stored copies taken earlier never change under
    the caller.
    """

    registry: PersonRegistry = field(default_factory=PersonRegistry)
    me_id: Optional[str] = None
    deletion_policy: DeletionPolicy = DeletionPolicy.REPAIR
    read_only: bool = False

    @classmethod
    def from_share(cls, token: str) -> "TreeState":
        return cls(registry=decode_share(token), read_only=True)

    def _check_writable(self) -> None:
        if self.read_only:
            raise ReadOnlyStateError("Shared trees are read-only")

    # -----------------------------
    # Queries
    # -----------------------------

    def get(self, person_id: str) -> Person:
        person = self.registry.get(person_id)
        if person is None:
            raise PersonNotFoundError(person_id)
        return person

    def me(self) -> Optional[Person]:
        return self.registry.get(self.me_id)

    def layout(self, options: Optional[LayoutOptions] = None) -> TreeLayout:
        """Layout of the current set; options default to the configured ones."""
        return safe_build_layout(self.registry, options or LayoutOptions.from_config(get_config()))

    # -----------------------------
    # Mutations
    # -----------------------------

    def replace(self, registry: PersonRegistry) -> None:
        """Swap in a whole new set (import results, loads)."""
        self._check_writable()
        self.registry = registry
        if self.me_id and self.me_id not in registry:
            self.me_id = None

    def add_member(
        self,
        name: str = DEFAULT_MEMBER_NAME,
        gender: str = MALE,
        now_ms: Optional[int] = None,
    ) -> Person:
        self._check_writable()
        name = name.strip()
        if not name:
            raise ValueError("name must not be blank")
        person = Person(id=member_id(now_ms, taken=self.registry), name=name, gender=gender)
        out = self.registry.copy()
        out.register(person)
        self.registry = out
        log.info("Added member %s", person.id)
        return person

    def create_self(
        self,
        name: str,
        *,
        photo: Optional[str] = None,
        bio: str = DEFAULT_SELF_BIO,
        now_ms: Optional[int] = None,
    ) -> Person:
        """Start a fresh tree holding only the user, marked as "me"."""
        self._check_writable()
        person = Person(
            id=self_member_id(now_ms),
            name=name.strip() or DEFAULT_MEMBER_NAME,
            gender=MALE,
            photo=photo,
            bio=bio,
        )
        self.registry = PersonRegistry([person])
        self.me_id = person.id
        log.info("Initialized tree with self %s", person.id)
        return person

    def update_member(self, edited: Person) -> Person:
        self._check_writable()
        if not edited.name.strip():
            raise ValueError("name must not be blank")
        self.registry = apply_edit(self.registry, edited)
        return copy.deepcopy(self.get(edited.id))

    def delete_member(self, person_id: str) -> None:
        self._check_writable()
        self.registry = remove_person(self.registry, person_id, self.deletion_policy)
        if self.me_id == person_id:
            self.me_id = None
