"""
Library Module: study sets, flashcards, folders and bulk import.
"""

from puplearn.library.flashcard_parser import ParsedFlashcard, ParseResult, parse_flashcards
from puplearn.library.library_service import LibraryService

__all__ = [
    "LibraryService",
    "ParsedFlashcard",
    "ParseResult",
    "parse_flashcards",
]
