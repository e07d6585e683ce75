"""
Study Service for flip mode history.

Stores finished flip passes (StudySession + per-card SessionResult) and
lists recent ones for the history view.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from loguru import logger
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import select
from sqlalchemy.orm import selectinload, sessionmaker

from config import get_settings
from puplearn.core.errors import InvalidInputError, NotFoundError
from puplearn.db.database import session_scope
from puplearn.db.models import SessionResult, StudySession, StudySet
from puplearn.library.library_service import resolve_user
from puplearn.study.flip_session import FlipSummary


class CardResultInput(BaseModel):
    flashcard_id: str = Field(..., min_length=1)
    is_correct: bool


class StudySessionRequest(BaseModel):
    """Payload for recording a finished flip pass."""

    study_set_id: str = Field(..., min_length=1)
    total_cards: int = Field(..., ge=0)
    correct_cards: int = Field(..., ge=0)
    wrong_cards: int = Field(..., ge=0)
    results: list[CardResultInput]


@dataclass
class StudySessionView:
    id: str
    study_set_id: str
    study_set_title: str
    total_cards: int
    correct_cards: int
    wrong_cards: int
    created_at: datetime
    wrong_flashcard_ids: list[str]


def _view(study_session: StudySession) -> StudySessionView:
    return StudySessionView(
        id=study_session.id,
        study_set_id=study_session.study_set_id,
        study_set_title=study_session.study_set.title,
        total_cards=study_session.total_cards,
        correct_cards=study_session.correct_cards,
        wrong_cards=study_session.wrong_cards,
        created_at=study_session.created_at,
        wrong_flashcard_ids=[r.flashcard_id for r in study_session.results if not r.is_correct],
    )


class StudyService:
    """Flip mode session records for one user."""

    def __init__(
        self,
        user_email: str | None = None,
        session_factory: sessionmaker | None = None,
    ):
        settings = get_settings()
        self.user_email = user_email or settings.user_email
        self.user_name = settings.user_name
        self._session_factory = session_factory

    def record_session(self, study_set_id: str, summary: FlipSummary) -> StudySessionView:
        """
        Persist a finished flip pass.

        Args:
            study_set_id: Study set that was studied
            summary: Totals and per-card results from FlipDeck.summary()

        Returns:
            The stored session
        """
        try:
            request = StudySessionRequest(
                study_set_id=study_set_id,
                total_cards=summary.total_cards,
                correct_cards=summary.correct_cards,
                wrong_cards=summary.wrong_cards,
                results=[
                    {"flashcard_id": card_id, "is_correct": is_correct}
                    for card_id, is_correct in summary.results.items()
                ],
            )
        except ValidationError as e:
            raise InvalidInputError.from_validation_error(e) from e

        with session_scope(self._session_factory) as session:
            user = resolve_user(session, self.user_email, self.user_name)
            study_set = session.scalar(
                select(StudySet).where(
                    StudySet.id == request.study_set_id, StudySet.user_id == user.id
                )
            )
            if study_set is None:
                raise NotFoundError("Study set", request.study_set_id)

            study_session = StudySession(
                user_id=user.id,
                study_set_id=study_set.id,
                total_cards=request.total_cards,
                correct_cards=request.correct_cards,
                wrong_cards=request.wrong_cards,
                results=[
                    SessionResult(flashcard_id=r.flashcard_id, is_correct=r.is_correct)
                    for r in request.results
                ],
            )
            session.add(study_session)
            session.flush()
            logger.info(
                f"Recorded study session {study_session.id}: "
                f"{request.correct_cards}/{request.total_cards} correct"
            )
            return _view(study_session)

    def list_sessions(self, study_set_id: str | None = None, limit: int = 10) -> list[StudySessionView]:
        """Most recent flip sessions, newest first."""
        with session_scope(self._session_factory) as session:
            user = resolve_user(session, self.user_email, self.user_name)
            query = (
                select(StudySession)
                .where(StudySession.user_id == user.id)
                .options(
                    selectinload(StudySession.study_set),
                    selectinload(StudySession.results),
                )
            )
            if study_set_id:
                query = query.where(StudySession.study_set_id == study_set_id)
            query = query.order_by(StudySession.created_at.desc()).limit(limit)
            return [_view(s) for s in session.scalars(query)]
