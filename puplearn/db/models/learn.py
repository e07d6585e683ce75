"""
Learn Mode models.

- LearnSession: one user's pass through a (sub)set of a study set's cards
- LearnProgress: per-card counters scoped to one learn session

LearnProgress references its flashcard without owning it: a flashcard
deleted mid-session leaves a dangling reference, which the learn service
treats as missing content.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, id_column
from .library import Flashcard, StudySet


class LearnSession(TimestampMixin, Base):
    __tablename__ = "learn_sessions"

    id: Mapped[str] = id_column()
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    study_set_id: Mapped[str] = mapped_column(
        ForeignKey("study_sets.id", ondelete="CASCADE"), nullable=False
    )
    mastery_goal: Mapped[int] = mapped_column(Integer, default=2)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)

    # Relationships
    study_set: Mapped[StudySet] = relationship(back_populates="learn_sessions")
    progress: Mapped[list[LearnProgress]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="LearnProgress.position",
    )

    __table_args__ = (
        Index("idx_learn_sessions_open", "user_id", "study_set_id", "is_completed"),
    )

    def __repr__(self) -> str:
        return f"<LearnSession {self.id} set={self.study_set_id} completed={self.is_completed}>"


class LearnProgress(TimestampMixin, Base):
    __tablename__ = "learn_progress"

    id: Mapped[str] = id_column()
    session_id: Mapped[str] = mapped_column(
        ForeignKey("learn_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    flashcard_id: Mapped[str] = mapped_column(String(36), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0)

    correct_streak: Mapped[int] = mapped_column(Integer, default=0)
    total_correct: Mapped[int] = mapped_column(Integer, default=0)
    total_incorrect: Mapped[int] = mapped_column(Integer, default=0)
    mastered: Mapped[bool] = mapped_column(Boolean, default=False)
    last_seen: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    priority: Mapped[int] = mapped_column(Integer, default=100)

    # Relationships
    session: Mapped[LearnSession] = relationship(back_populates="progress")
    flashcard: Mapped[Flashcard | None] = relationship(
        primaryjoin="foreign(LearnProgress.flashcard_id) == Flashcard.id",
        viewonly=True,
    )

    def __repr__(self) -> str:
        return (
            f"<LearnProgress card={self.flashcard_id} streak={self.correct_streak} "
            f"mastered={self.mastered}>"
        )
