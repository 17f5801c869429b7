"""
Person model, canonical set and invariant maintenance.

The reconciler lives in ``family_graph.registry.reconcile`` and is imported
from there directly.
"""

from family_graph.registry.entities import (
    FEMALE,
    GENDERS,
    MALE,
    OTHER,
    Person,
    PersonRegistry,
    normalize_gender,
)
from family_graph.registry.invariants import (
    DeletionPolicy,
    InvariantViolation,
    apply_edit,
    assign_spouse,
    check_invariants,
    release_spouse,
    remove_person,
)

__all__ = [
    "FEMALE",
    "GENDERS",
    "MALE",
    "OTHER",
    "DeletionPolicy",
    "InvariantViolation",
    "Person",
    "PersonRegistry",
    "apply_edit",
    "assign_spouse",
    "check_invariants",
    "normalize_gender",
    "release_spouse",
    "remove_person",
]
