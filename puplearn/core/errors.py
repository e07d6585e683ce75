"""
Error taxonomy for PupLearn services.

Scheduler functions never raise; everything that can fail (look-ups,
session state checks, input validation) raises one of these.
"""

from __future__ import annotations

from pydantic import ValidationError


class PupLearnError(Exception):
    """Base class for all expected, user-facing failures."""


class NotFoundError(PupLearnError):
    """Raised when a record does not exist or belongs to another user."""

    def __init__(self, entity: str, entity_id: str | None = None):
        self.entity = entity
        self.entity_id = entity_id
        if entity_id:
            super().__init__(f"{entity} not found: {entity_id}")
        else:
            super().__init__(f"{entity} not found")


class InvalidSessionStateError(PupLearnError):
    """Raised when an answer cannot be applied to a learn session."""


class EmptyStudySetError(PupLearnError):
    """Raised when a learn session would contain no cards."""


class CardContentMissingError(PupLearnError):
    """
    Raised when a selected card has no flashcard content.

    Recoverable: the session has already been closed when this is raised.
    """

    def __init__(self, session_id: str, flashcard_id: str | None):
        self.session_id = session_id
        self.flashcard_id = flashcard_id
        super().__init__(
            f"Flashcard {flashcard_id} is missing its content; "
            f"learn session {session_id} was closed"
        )


class InvalidInputError(PupLearnError):
    """Raised when user supplied data fails validation."""

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> InvalidInputError:
        """Build from a pydantic ValidationError, keeping the first message."""
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", str(exc))
        return cls(f"{location}: {message}" if location else message)


class ImportParseError(PupLearnError):
    """Raised when bulk-import text matches none of the known formats."""
