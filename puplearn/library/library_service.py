"""
Library Service for study sets, flashcards and folders.

Provides the owner-scoped CRUD operations used by the CLI:
- Folders (nested, ordered among siblings)
- Study sets (favorites, folder placement, last accessed)
- Flashcards (single, bulk, and pasted-text import)

Every look-up filters on the owning user; another user's record is
reported exactly like a missing one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from config import get_settings
from puplearn.core.errors import ImportParseError, InvalidInputError, NotFoundError
from puplearn.db.database import session_scope
from puplearn.db.models import Flashcard, Folder, StudySet, User
from puplearn.db.models.base import utcnow
from puplearn.library.flashcard_parser import parse_flashcards
from puplearn.library.schemas import BulkFlashcardsRequest, FlashcardInput, StudySetInput


@dataclass
class FlashcardView:
    id: str
    question: str
    answer: str
    study_set_id: str


@dataclass
class StudySetView:
    """A study set as shown to the user."""

    id: str
    title: str
    description: str | None
    folder_id: str | None
    is_favorite: bool
    last_accessed: datetime | None
    created_at: datetime
    card_count: int
    flashcards: list[FlashcardView] = field(default_factory=list)


@dataclass
class FolderView:
    id: str
    name: str
    parent_id: str | None
    position: int
    study_set_count: int


@dataclass
class ImportResult:
    """Outcome of a pasted-text import."""

    count: int
    detected_format: str | None


def resolve_user(session: Session, email: str, name: str | None = None) -> User:
    """Get the user with this email, creating it on first use."""
    user = session.scalar(select(User).where(User.email == email))
    if user is None:
        user = User(email=email, name=name)
        session.add(user)
        session.flush()
        logger.info(f"Created user {email}")
    return user


def _flashcard_view(card: Flashcard) -> FlashcardView:
    return FlashcardView(
        id=card.id,
        question=card.question,
        answer=card.answer,
        study_set_id=card.study_set_id,
    )


def _study_set_view(study_set: StudySet, include_cards: bool = False) -> StudySetView:
    return StudySetView(
        id=study_set.id,
        title=study_set.title,
        description=study_set.description,
        folder_id=study_set.folder_id,
        is_favorite=study_set.is_favorite,
        last_accessed=study_set.last_accessed,
        created_at=study_set.created_at,
        card_count=len(study_set.flashcards),
        flashcards=[_flashcard_view(c) for c in study_set.flashcards] if include_cards else [],
    )


class LibraryService:
    """
    High-level service for library operations.

    Each public method runs in its own transaction.
    """

    def __init__(
        self,
        user_email: str | None = None,
        session_factory: sessionmaker | None = None,
    ):
        """
        Initialize library service.

        Args:
            user_email: Owner identity (defaults to the configured user)
            session_factory: SQLAlchemy sessionmaker (defaults to the app engine)
        """
        settings = get_settings()
        self.user_email = user_email or settings.user_email
        self.user_name = settings.user_name
        self._session_factory = session_factory

    def _scope(self):
        return session_scope(self._session_factory)

    def _user(self, session: Session) -> User:
        return resolve_user(session, self.user_email, self.user_name)

    # ========================================
    # Owner-scoped look-ups
    # ========================================

    def _get_study_set(self, session: Session, user: User, study_set_id: str) -> StudySet:
        study_set = session.scalar(
            select(StudySet)
            .where(StudySet.id == study_set_id, StudySet.user_id == user.id)
            .options(selectinload(StudySet.flashcards))
        )
        if study_set is None:
            raise NotFoundError("Study set", study_set_id)
        return study_set

    def _get_folder(self, session: Session, user: User, folder_id: str) -> Folder:
        folder = session.scalar(
            select(Folder).where(Folder.id == folder_id, Folder.user_id == user.id)
        )
        if folder is None:
            raise NotFoundError("Folder", folder_id)
        return folder

    def _get_flashcard(self, session: Session, user: User, flashcard_id: str) -> Flashcard:
        card = session.scalar(
            select(Flashcard)
            .join(StudySet)
            .where(Flashcard.id == flashcard_id, StudySet.user_id == user.id)
        )
        if card is None:
            raise NotFoundError("Flashcard", flashcard_id)
        return card

    # ========================================
    # Folders
    # ========================================

    def create_folder(self, name: str, parent_id: str | None = None) -> FolderView:
        """Create a folder after its last sibling."""
        if not name or not name.strip():
            raise InvalidInputError("Folder name is required")

        with self._scope() as session:
            user = self._user(session)
            if parent_id:
                self._get_folder(session, user, parent_id)

            last_position = session.scalar(
                select(func.max(Folder.position)).where(
                    Folder.user_id == user.id,
                    Folder.parent_id.is_(None) if parent_id is None else Folder.parent_id == parent_id,
                )
            )
            position = last_position + 1 if last_position is not None else 0

            folder = Folder(name=name.strip(), user_id=user.id, parent_id=parent_id, position=position)
            session.add(folder)
            session.flush()
            logger.info(f"Created folder {folder.name!r} at position {position}")
            return FolderView(folder.id, folder.name, folder.parent_id, folder.position, 0)

    def list_folders(self) -> list[FolderView]:
        """All of the user's folders, ordered by position."""
        with self._scope() as session:
            user = self._user(session)
            rows = session.execute(
                select(Folder, func.count(StudySet.id))
                .outerjoin(StudySet, StudySet.folder_id == Folder.id)
                .where(Folder.user_id == user.id)
                .group_by(Folder.id)
                .order_by(Folder.position, Folder.name)
            ).all()
            return [
                FolderView(folder.id, folder.name, folder.parent_id, folder.position, count)
                for folder, count in rows
            ]

    def rename_folder(self, folder_id: str, name: str) -> FolderView:
        if not name or not name.strip():
            raise InvalidInputError("Folder name is required")

        with self._scope() as session:
            user = self._user(session)
            folder = self._get_folder(session, user, folder_id)
            folder.name = name.strip()
            return FolderView(
                folder.id, folder.name, folder.parent_id, folder.position, len(folder.study_sets)
            )

    def delete_folder(self, folder_id: str) -> None:
        """Delete a folder and its sub-folders; contained study sets are kept unfiled."""
        with self._scope() as session:
            user = self._user(session)
            folder = self._get_folder(session, user, folder_id)
            session.delete(folder)
            logger.info(f"Deleted folder {folder_id}")

    # ========================================
    # Study sets
    # ========================================

    def create_study_set(
        self,
        title: str,
        description: str | None = None,
        folder_id: str | None = None,
    ) -> StudySetView:
        try:
            data = StudySetInput(title=title, description=description, folder_id=folder_id)
        except ValidationError as e:
            raise InvalidInputError.from_validation_error(e) from e

        with self._scope() as session:
            user = self._user(session)
            if data.folder_id:
                self._get_folder(session, user, data.folder_id)

            study_set = StudySet(
                title=data.title,
                description=data.description,
                folder_id=data.folder_id,
                user_id=user.id,
            )
            session.add(study_set)
            session.flush()
            logger.info(f"Created study set {study_set.title!r}")
            return _study_set_view(study_set)

    def list_study_sets(
        self,
        folder_id: str | None = None,
        favorites_only: bool = False,
    ) -> list[StudySetView]:
        """The user's study sets, most recently updated first."""
        with self._scope() as session:
            user = self._user(session)
            query = (
                select(StudySet)
                .where(StudySet.user_id == user.id)
                .options(selectinload(StudySet.flashcards))
                .order_by(StudySet.updated_at.desc())
            )
            if folder_id:
                query = query.where(StudySet.folder_id == folder_id)
            if favorites_only:
                query = query.where(StudySet.is_favorite.is_(True))
            return [_study_set_view(s) for s in session.scalars(query)]

    def get_study_set(self, study_set_id: str) -> StudySetView:
        """Fetch a study set with its cards and record the access time."""
        with self._scope() as session:
            user = self._user(session)
            study_set = self._get_study_set(session, user, study_set_id)
            study_set.last_accessed = utcnow()
            return _study_set_view(study_set, include_cards=True)

    def update_study_set(
        self,
        study_set_id: str,
        title: str | None = None,
        description: str | None = None,
    ) -> StudySetView:
        with self._scope() as session:
            user = self._user(session)
            study_set = self._get_study_set(session, user, study_set_id)
            if title is not None:
                if not title.strip():
                    raise InvalidInputError("Title is required")
                study_set.title = title.strip()
            if description is not None:
                study_set.description = description or None
            return _study_set_view(study_set)

    def toggle_favorite(self, study_set_id: str) -> StudySetView:
        with self._scope() as session:
            user = self._user(session)
            study_set = self._get_study_set(session, user, study_set_id)
            study_set.is_favorite = not study_set.is_favorite
            return _study_set_view(study_set)

    def move_study_set(self, study_set_id: str, folder_id: str | None) -> StudySetView:
        """Place a study set in a folder, or unfile it with folder_id=None."""
        with self._scope() as session:
            user = self._user(session)
            study_set = self._get_study_set(session, user, study_set_id)
            if folder_id:
                self._get_folder(session, user, folder_id)
            study_set.folder_id = folder_id
            return _study_set_view(study_set)

    def delete_study_set(self, study_set_id: str) -> None:
        with self._scope() as session:
            user = self._user(session)
            study_set = self._get_study_set(session, user, study_set_id)
            session.delete(study_set)
            logger.info(f"Deleted study set {study_set_id}")

    # ========================================
    # Flashcards
    # ========================================

    def list_flashcards(self, study_set_id: str) -> list[FlashcardView]:
        with self._scope() as session:
            user = self._user(session)
            study_set = self._get_study_set(session, user, study_set_id)
            return [_flashcard_view(card) for card in study_set.flashcards]

    def add_flashcard(self, study_set_id: str, question: str, answer: str) -> FlashcardView:
        try:
            data = FlashcardInput(question=question, answer=answer)
        except ValidationError as e:
            raise InvalidInputError.from_validation_error(e) from e

        with self._scope() as session:
            user = self._user(session)
            study_set = self._get_study_set(session, user, study_set_id)
            card = Flashcard(question=data.question, answer=data.answer, study_set_id=study_set.id)
            session.add(card)
            study_set.updated_at = utcnow()
            session.flush()
            return _flashcard_view(card)

    def update_flashcard(
        self,
        flashcard_id: str,
        question: str | None = None,
        answer: str | None = None,
    ) -> FlashcardView:
        with self._scope() as session:
            user = self._user(session)
            card = self._get_flashcard(session, user, flashcard_id)
            try:
                data = FlashcardInput(
                    question=question if question is not None else card.question,
                    answer=answer if answer is not None else card.answer,
                )
            except ValidationError as e:
                raise InvalidInputError.from_validation_error(e) from e
            card.question = data.question
            card.answer = data.answer
            return _flashcard_view(card)

    def delete_flashcard(self, flashcard_id: str) -> None:
        with self._scope() as session:
            user = self._user(session)
            card = self._get_flashcard(session, user, flashcard_id)
            session.delete(card)

    def bulk_add_flashcards(self, study_set_id: str, cards: list[dict]) -> int:
        """
        Add many cards in one transaction.

        Args:
            study_set_id: Target study set
            cards: Dicts with "question" and "answer"

        Returns:
            Number of cards created
        """
        try:
            data = BulkFlashcardsRequest(flashcards=cards)
        except ValidationError as e:
            raise InvalidInputError.from_validation_error(e) from e

        with self._scope() as session:
            user = self._user(session)
            study_set = self._get_study_set(session, user, study_set_id)
            session.add_all(
                Flashcard(question=c.question, answer=c.answer, study_set_id=study_set.id)
                for c in data.flashcards
            )
            study_set.updated_at = utcnow()
            logger.info(f"Created {len(data.flashcards)} flashcards in study set {study_set_id}")
            return len(data.flashcards)

    def import_text(self, study_set_id: str, text: str) -> ImportResult:
        """Parse pasted text and add the resulting cards."""
        result = parse_flashcards(text)
        if not result.success:
            raise ImportParseError(result.error or "Could not parse flashcards")

        count = self.bulk_add_flashcards(
            study_set_id,
            [{"question": c.question, "answer": c.answer} for c in result.flashcards],
        )
        logger.debug(f"Import detected format: {result.detected_format}")
        return ImportResult(count=count, detected_format=result.detected_format)
