"""
Learn Service: Learn Mode sessions over the database.

Provides the operations the CLI drives:
- Create (or resume) a learn session for a study set or a card subset
- Pick the next card
- Submit an answer and persist the updated progress
- Complete, delete, restart, and review-wrong flows

Each operation loads a snapshot inside one transaction, runs the
LearnSessionMachine transition, and writes back what changed. The session
row is locked for the duration of an answer submission so two submissions
for the same session cannot interleave.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from config import get_settings
from puplearn.core.errors import (
    CardContentMissingError,
    EmptyStudySetError,
    InvalidInputError,
    NotFoundError,
)
from puplearn.db.database import session_scope
from puplearn.db.models import LearnProgress, LearnSession, StudySet
from puplearn.learning.scheduler import (
    INITIAL_PRIORITY,
    CardProgress,
    LearnCard,
    LearnModeScheduler,
    RandomSource,
)
from puplearn.learning.session_machine import LearnSessionMachine, LearnSessionSnapshot
from puplearn.library.library_service import resolve_user


def _to_card_progress(row: LearnProgress) -> CardProgress:
    return CardProgress(
        id=row.id,
        flashcard_id=row.flashcard_id,
        correct_streak=row.correct_streak,
        total_correct=row.total_correct,
        total_incorrect=row.total_incorrect,
        mastered=row.mastered,
        last_seen=row.last_seen,
        priority=row.priority,
    )


def _to_learn_card(row: LearnProgress) -> LearnCard:
    card = row.flashcard
    return LearnCard(
        id=row.flashcard_id,
        question=card.question if card is not None else None,
        answer=card.answer if card is not None else None,
        progress=_to_card_progress(row),
    )


def _to_snapshot(learn_session: LearnSession) -> LearnSessionSnapshot:
    return LearnSessionSnapshot(
        id=learn_session.id,
        study_set_id=learn_session.study_set_id,
        mastery_goal=learn_session.mastery_goal,
        is_completed=learn_session.is_completed,
        cards=[_to_learn_card(row) for row in learn_session.progress],
    )


def _apply_progress(row: LearnProgress, progress: CardProgress) -> None:
    row.correct_streak = progress.correct_streak
    row.total_correct = progress.total_correct
    row.total_incorrect = progress.total_incorrect
    row.mastered = progress.mastered
    row.last_seen = progress.last_seen
    row.priority = progress.priority


class LearnService:
    """
    Learn Mode session lifecycle for one user.

    The scheduler's random source and clock can be injected for
    deterministic tests.
    """

    def __init__(
        self,
        user_email: str | None = None,
        session_factory: sessionmaker | None = None,
        rng: RandomSource | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        settings = get_settings()
        self.user_email = user_email or settings.user_email
        self.user_name = settings.user_name
        self.default_mastery_goal = settings.learn_mastery_goal
        self._session_factory = session_factory
        self._rng = rng
        self._clock = clock

    def _scope(self):
        return session_scope(self._session_factory)

    def _machine(self, snapshot: LearnSessionSnapshot) -> LearnSessionMachine:
        scheduler = LearnModeScheduler(
            mastery_goal=snapshot.mastery_goal,
            rng=self._rng,
            clock=self._clock,
        )
        return LearnSessionMachine(snapshot, scheduler)

    def _load(self, session: Session, session_id: str, lock: bool = False) -> LearnSession:
        user = resolve_user(session, self.user_email, self.user_name)
        query = select(LearnSession).where(
            LearnSession.id == session_id,
            LearnSession.user_id == user.id,
        )
        if lock:
            query = query.with_for_update()
        learn_session = session.scalar(
            query.options(
                selectinload(LearnSession.progress).selectinload(LearnProgress.flashcard)
            )
        )
        if learn_session is None:
            raise NotFoundError("Learn session", session_id)
        return learn_session

    # ========================================
    # Lifecycle
    # ========================================

    def create_session(
        self,
        study_set_id: str,
        mastery_goal: int | None = None,
        flashcard_ids: list[str] | None = None,
    ) -> LearnSessionSnapshot:
        """
        Start Learn Mode on a study set.

        Without a subset, an open session that already covers every card of
        the set is resumed instead of creating a new one.

        Args:
            study_set_id: Study set to learn
            mastery_goal: Correct answers in a row needed (defaults to config)
            flashcard_ids: Optional subset of the set's flashcards

        Returns:
            Snapshot of the created or resumed session

        Raises:
            NotFoundError: Study set missing or owned by someone else
            EmptyStudySetError: No cards to learn
        """
        goal = mastery_goal if mastery_goal is not None else self.default_mastery_goal
        if goal < 1:
            raise InvalidInputError("Mastery goal must be at least 1")

        with self._scope() as session:
            user = resolve_user(session, self.user_email, self.user_name)
            study_set = self._get_study_set(session, user.id, study_set_id)

            if not flashcard_ids and study_set.flashcards:
                existing = self._find_resumable(session, user.id, study_set)
                if existing is not None:
                    logger.info(f"Resuming learn session {existing.id}")
                    return _to_snapshot(existing)

            learn_session = self._create_in(session, user.id, study_set, goal, flashcard_ids)
            return self._snapshot_by_id(session, learn_session.id)

    def _get_study_set(self, session: Session, user_id: str, study_set_id: str) -> StudySet:
        study_set = session.scalar(
            select(StudySet)
            .where(StudySet.id == study_set_id, StudySet.user_id == user_id)
            .options(selectinload(StudySet.flashcards))
        )
        if study_set is None:
            raise NotFoundError("Study set", study_set_id)
        return study_set

    def _create_in(
        self,
        session: Session,
        user_id: str,
        study_set: StudySet,
        goal: int,
        flashcard_ids: list[str] | None = None,
    ) -> LearnSession:
        """Add a fresh learn session inside the caller's transaction."""
        if not study_set.flashcards:
            raise EmptyStudySetError(f"Study set {study_set.title!r} has no flashcards")

        if flashcard_ids:
            wanted = set(flashcard_ids)
            cards = [card for card in study_set.flashcards if card.id in wanted]
        else:
            cards = list(study_set.flashcards)
        if not cards:
            raise EmptyStudySetError("No valid flashcards to learn")

        learn_session = LearnSession(
            user_id=user_id,
            study_set_id=study_set.id,
            mastery_goal=goal,
            is_completed=False,
            progress=[
                LearnProgress(
                    flashcard_id=card.id,
                    position=position,
                    correct_streak=0,
                    total_correct=0,
                    total_incorrect=0,
                    mastered=False,
                    priority=INITIAL_PRIORITY,
                    last_seen=None,
                )
                for position, card in enumerate(cards)
            ],
        )
        session.add(learn_session)
        session.flush()
        logger.info(
            f"Created learn session {learn_session.id} with {len(cards)} cards "
            f"(mastery goal {goal})"
        )
        return learn_session

    def _find_resumable(self, session: Session, user_id: str, study_set: StudySet) -> LearnSession | None:
        candidates = session.scalars(
            select(LearnSession)
            .where(
                LearnSession.user_id == user_id,
                LearnSession.study_set_id == study_set.id,
                LearnSession.is_completed.is_(False),
            )
            .options(selectinload(LearnSession.progress).selectinload(LearnProgress.flashcard))
            .order_by(LearnSession.created_at.desc())
        )
        for candidate in candidates:
            if len(candidate.progress) == len(study_set.flashcards):
                return candidate
        return None

    def _snapshot_by_id(self, session: Session, session_id: str) -> LearnSessionSnapshot:
        session.expire_all()
        return _to_snapshot(self._load(session, session_id))

    def get_session(self, session_id: str) -> LearnSessionSnapshot:
        with self._scope() as session:
            return _to_snapshot(self._load(session, session_id))

    def get_next_card(self, session_id: str) -> LearnCard | None:
        """
        Select the next card to present.

        Returns:
            The next card, or None when the session is complete

        Raises:
            CardContentMissingError: The selected card lost its flashcard;
                the session has been marked completed
        """
        with self._scope() as session:
            learn_session = self._load(session, session_id)
            machine = self._machine(_to_snapshot(learn_session))
            card = machine.start()

            if machine.is_complete and not learn_session.is_completed:
                learn_session.is_completed = True

            if machine.error is None:
                return card
            error = CardContentMissingError(session_id, machine.failed_card_id)

        # Raised after the commit so the completed flag is kept
        raise error

    def submit_answer(self, session_id: str, progress_id: str, is_correct: bool) -> CardProgress:
        """
        Record an answer for one card.

        Read, update, persist and completion check happen in one locked
        transaction.

        Raises:
            NotFoundError: Session missing or owned by someone else
            InvalidSessionStateError: Session already complete, or the
                progress record is not part of it
        """
        with self._scope() as session:
            learn_session = self._load(session, session_id, lock=True)
            machine = self._machine(_to_snapshot(learn_session))
            # The next card is drawn by get_next_card
            updated = machine.record_answer(progress_id, is_correct, advance=False)

            row = next(r for r in learn_session.progress if r.id == progress_id)
            _apply_progress(row, updated)

            if machine.is_complete:
                learn_session.is_completed = True
                logger.info(f"All cards mastered in learn session {session_id}")

            return updated

    def mark_completed(self, session_id: str) -> LearnSessionSnapshot:
        """Explicitly complete a session."""
        with self._scope() as session:
            learn_session = self._load(session, session_id, lock=True)
            learn_session.is_completed = True
            return _to_snapshot(learn_session)

    def delete_session(self, session_id: str) -> None:
        with self._scope() as session:
            learn_session = self._load(session, session_id)
            session.delete(learn_session)
            logger.info(f"Deleted learn session {session_id}")

    # ========================================
    # Restart / review flows
    # ========================================

    def restart_session(self, session_id: str) -> LearnSessionSnapshot:
        """Throw away a session and start fresh on the full study set."""
        return self._replace(session_id, wrong_only=False)

    def review_wrong(self, session_id: str) -> LearnSessionSnapshot:
        """
        Replace a session with one restricted to the cards answered wrong.

        Falls back to a full restart when nothing was missed.
        """
        return self._replace(session_id, wrong_only=True)

    def _replace(self, session_id: str, wrong_only: bool) -> LearnSessionSnapshot:
        # Delete and re-create in one transaction: if the new session cannot
        # be built the old one is rolled back untouched.
        with self._scope() as session:
            old = self._load(session, session_id, lock=True)
            study_set = self._get_study_set(session, old.user_id, old.study_set_id)

            flashcard_ids = None
            if wrong_only:
                flashcard_ids = self._machine(_to_snapshot(old)).wrong_card_ids()
                if not flashcard_ids:
                    logger.info("No missed cards to review; restarting full session")

            user_id, goal = old.user_id, old.mastery_goal
            session.delete(old)
            session.flush()
            logger.info(f"Deleted learn session {session_id}")

            learn_session = self._create_in(session, user_id, study_set, goal, flashcard_ids)
            return self._snapshot_by_id(session, learn_session.id)
