"""
Core orchestration: application state, the import pipeline and the shared
exception hierarchy.
"""

from family_graph.core.exceptions import (
    ExtractionError,
    FamilyGraphError,
    InvalidStructureError,
    PersonNotFoundError,
    ReadOnlyStateError,
    ShareDecodeError,
)

__all__ = [
    "ExtractionError",
    "FamilyGraphError",
    "InvalidStructureError",
    "PersonNotFoundError",
    "ReadOnlyStateError",
    "ShareDecodeError",
]
