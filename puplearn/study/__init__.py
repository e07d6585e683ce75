"""
Study Module for flip mode.

Provides:
- FlipDeck: self-graded flip cards with restudy of missed cards
- StudyService: flip session history
"""

from puplearn.study.flip_session import FlipCard, FlipDeck, FlipSummary
from puplearn.study.study_service import StudyService

__all__ = [
    "FlipCard",
    "FlipDeck",
    "FlipSummary",
    "StudyService",
]
