# SQLAlchemy models
from .base import Base
from .learn import LearnProgress, LearnSession
from .library import Flashcard, Folder, StudySet, User
from .study import SessionResult, StudySession

__all__ = [
    "Base",
    "User",
    "Folder",
    "StudySet",
    "Flashcard",
    "LearnSession",
    "LearnProgress",
    "StudySession",
    "SessionResult",
]
