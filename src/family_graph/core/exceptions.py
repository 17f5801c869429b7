class FamilyGraphError(Exception):
    """Base exception for family_graph failures."""


class InvalidStructureError(FamilyGraphError):
    """Raised when the primary-parent chain cannot form a single-rooted tree."""

    def __init__(self, message: str, cycle=None):
        super().__init__(message)
        self.cycle = list(cycle or [])


class ExtractionError(FamilyGraphError):
    """Raised by extractors when the collaborator fails or answers garbage."""


class ShareDecodeError(FamilyGraphError):
    """Raised when a share token cannot be decoded into a person set."""


class PersonNotFoundError(FamilyGraphError, KeyError):
    """Raised when an edit targets an identifier that is not in the set."""


class ReadOnlyStateError(FamilyGraphError):
    """Raised when a shared (read-only) view is edited."""
