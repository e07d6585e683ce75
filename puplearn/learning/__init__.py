"""
Learning: Learn Mode domain.

This package contains the adaptive study logic:
- scheduler: weighted card selection and progress updates
- session_machine: loading -> learning -> complete lifecycle
- learn_service: learn sessions persisted through SQLAlchemy
"""

from puplearn.learning.learn_service import LearnService
from puplearn.learning.scheduler import (
    CardProgress,
    LearnCard,
    LearnModeScheduler,
    ProgressSummary,
    normalize_answer,
)
from puplearn.learning.session_machine import (
    LearnSessionMachine,
    LearnSessionSnapshot,
    SessionPhase,
)

__all__ = [
    # Scheduler
    "CardProgress",
    "LearnCard",
    "LearnModeScheduler",
    "ProgressSummary",
    "normalize_answer",
    # Session
    "LearnSessionMachine",
    "LearnSessionSnapshot",
    "SessionPhase",
    # Service
    "LearnService",
]
