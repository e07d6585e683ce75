"""
Core Module - Shared error types.

All services (learning, library, study) raise from this hierarchy so the
CLI can handle every expected failure at a single boundary.
"""

from puplearn.core.errors import (
    CardContentMissingError,
    EmptyStudySetError,
    ImportParseError,
    InvalidInputError,
    InvalidSessionStateError,
    NotFoundError,
    PupLearnError,
)

__all__ = [
    "PupLearnError",
    "NotFoundError",
    "InvalidSessionStateError",
    "EmptyStudySetError",
    "CardContentMissingError",
    "InvalidInputError",
    "ImportParseError",
]
