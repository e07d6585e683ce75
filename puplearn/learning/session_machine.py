"""
Learn Session state machine.

Lifecycle of one learn session around the scheduler:

    LOADING  -> LEARNING   first card selected
    LEARNING -> LEARNING   answer recorded, cards remain unmastered
    LEARNING -> COMPLETE   every card mastered, explicit completion,
                           or a selected card is missing its content

COMPLETE is terminal. Starting over means building a new session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from puplearn.core.errors import InvalidSessionStateError
from puplearn.learning.scheduler import CardProgress, LearnCard, LearnModeScheduler, ProgressSummary


class SessionPhase(str, Enum):
    """Phases of a learn session."""

    LOADING = "loading"
    LEARNING = "learning"
    COMPLETE = "complete"


@dataclass
class LearnSessionSnapshot:
    """In-memory view of a learn session and all of its cards."""

    id: str
    study_set_id: str
    mastery_goal: int
    is_completed: bool = False
    cards: list[LearnCard] = field(default_factory=list)

    def find_by_progress(self, progress_id: str) -> LearnCard | None:
        for card in self.cards:
            if card.progress.id == progress_id:
                return card
        return None


class LearnSessionMachine:
    """
    Drives one learn session through its phases.

    Holds no storage handles: the caller loads a snapshot, runs the
    transition, then persists whatever changed.
    """

    def __init__(
        self,
        snapshot: LearnSessionSnapshot,
        scheduler: LearnModeScheduler | None = None,
    ):
        self.snapshot = snapshot
        self.scheduler = scheduler or LearnModeScheduler(mastery_goal=snapshot.mastery_goal)
        self.phase = SessionPhase.COMPLETE if snapshot.is_completed else SessionPhase.LOADING
        self.current_card: LearnCard | None = None
        self.error: str | None = None
        self.failed_card_id: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.phase == SessionPhase.COMPLETE

    def start(self) -> LearnCard | None:
        """Select the first card, or complete right away if nothing is left."""
        if self.is_complete:
            return None
        return self._advance()

    def record_answer(
        self,
        progress_id: str,
        is_correct: bool,
        advance: bool = True,
    ) -> CardProgress:
        """
        Apply an answer and move to the next card.

        Args:
            progress_id: Progress record being answered
            is_correct: Answer outcome
            advance: Select the next card right away. Callers that pick
                the next card in a later step pass False so no draw is spent.

        Returns:
            The updated CardProgress, to be persisted by the caller

        Raises:
            InvalidSessionStateError: Session is complete, or the progress
                record does not belong to this session
        """
        if self.is_complete:
            raise InvalidSessionStateError(f"Learn session {self.snapshot.id} is already complete")

        card = self.snapshot.find_by_progress(progress_id)
        if card is None:
            raise InvalidSessionStateError(
                f"Progress {progress_id} does not belong to learn session {self.snapshot.id}"
            )

        card.progress = self.scheduler.update_progress(card.progress, is_correct)
        logger.debug(
            f"Card {card.id} answered {'correct' if is_correct else 'wrong'}: "
            f"streak={card.progress.correct_streak} mastered={card.progress.mastered}"
        )

        if self.scheduler.is_session_complete(self.snapshot.cards):
            self.complete()
        elif advance:
            self._advance()
        else:
            self.phase = SessionPhase.LEARNING
            self.current_card = None

        return card.progress

    def complete(self) -> None:
        """Mark the session complete (terminal)."""
        if not self.is_complete:
            logger.info(f"Learn session {self.snapshot.id} complete")
        self.phase = SessionPhase.COMPLETE
        self.snapshot.is_completed = True
        self.current_card = None

    def progress(self) -> ProgressSummary:
        return self.scheduler.calculate_progress(self.snapshot.cards)

    def wrong_card_ids(self) -> list[str]:
        """Flashcard ids answered incorrectly at least once, in session order."""
        return [card.id for card in self.snapshot.cards if card.progress.total_incorrect > 0]

    def _advance(self) -> LearnCard | None:
        card = self.scheduler.select_next_card(self.snapshot.cards)
        if card is None:
            self.complete()
            return None

        if not card.has_content:
            self.failed_card_id = card.id
            self.error = f"Flashcard {card.id} is missing its question or answer"
            logger.warning(f"Learn session {self.snapshot.id}: {self.error}; closing session")
            self.complete()
            return None

        self.phase = SessionPhase.LEARNING
        self.current_card = card
        return card
