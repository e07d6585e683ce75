"""
Library models.

SQLAlchemy models for the user's flashcard library:
- Users (local identity owning everything else)
- Folders (nestable, ordered among siblings)
- Study sets and their flashcards
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, id_column

if TYPE_CHECKING:
    from .learn import LearnSession
    from .study import StudySession


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[str] = id_column()
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class Folder(TimestampMixin, Base):
    """A folder of study sets; folders nest through parent_id."""

    __tablename__ = "folders"

    id: Mapped[str] = id_column()
    name: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    parent_id: Mapped[str | None] = mapped_column(ForeignKey("folders.id", ondelete="CASCADE"))
    position: Mapped[int] = mapped_column(Integer, default=0)

    # Relationships
    children: Mapped[list[Folder]] = relationship(
        back_populates="parent", cascade="all, delete-orphan", order_by="Folder.position"
    )
    parent: Mapped[Folder | None] = relationship(back_populates="children", remote_side=[id])
    study_sets: Mapped[list[StudySet]] = relationship(back_populates="folder")

    __table_args__ = (Index("idx_folders_user_parent", "user_id", "parent_id"),)

    def __repr__(self) -> str:
        return f"<Folder {self.name!r} position={self.position}>"


class StudySet(TimestampMixin, Base):
    """A titled collection of flashcards."""

    __tablename__ = "study_sets"

    id: Mapped[str] = id_column()
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    folder_id: Mapped[str | None] = mapped_column(ForeignKey("folders.id", ondelete="SET NULL"))
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False)
    last_accessed: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    folder: Mapped[Folder | None] = relationship(back_populates="study_sets")
    flashcards: Mapped[list[Flashcard]] = relationship(
        back_populates="study_set",
        cascade="all, delete-orphan",
        order_by="Flashcard.created_at",
    )
    learn_sessions: Mapped[list[LearnSession]] = relationship(
        back_populates="study_set", cascade="all, delete-orphan"
    )
    study_sessions: Mapped[list[StudySession]] = relationship(
        back_populates="study_set", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<StudySet {self.title!r}>"


class Flashcard(TimestampMixin, Base):
    __tablename__ = "flashcards"

    id: Mapped[str] = id_column()
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    study_set_id: Mapped[str] = mapped_column(
        ForeignKey("study_sets.id", ondelete="CASCADE"), nullable=False, index=True
    )

    study_set: Mapped[StudySet] = relationship(back_populates="flashcards")

    def __repr__(self) -> str:
        return f"<Flashcard {self.question[:30]!r}>"
