"""
Flip mode history models.

A StudySession records one self-graded pass over a study set, with one
SessionResult per card that was marked.
"""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, id_column
from .library import StudySet


class StudySession(TimestampMixin, Base):
    __tablename__ = "study_sessions"

    id: Mapped[str] = id_column()
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    study_set_id: Mapped[str] = mapped_column(
        ForeignKey("study_sets.id", ondelete="CASCADE"), nullable=False
    )
    total_cards: Mapped[int] = mapped_column(Integer, default=0)
    correct_cards: Mapped[int] = mapped_column(Integer, default=0)
    wrong_cards: Mapped[int] = mapped_column(Integer, default=0)

    study_set: Mapped[StudySet] = relationship(back_populates="study_sessions")
    results: Mapped[list[SessionResult]] = relationship(
        back_populates="study_session", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<StudySession {self.id} {self.correct_cards}/{self.total_cards}>"


class SessionResult(TimestampMixin, Base):
    __tablename__ = "session_results"

    id: Mapped[str] = id_column()
    study_session_id: Mapped[str] = mapped_column(
        ForeignKey("study_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    flashcard_id: Mapped[str] = mapped_column(String(36), nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)

    study_session: Mapped[StudySession] = relationship(back_populates="results")
