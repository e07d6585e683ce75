"""
Learn Mode Scheduler.

Adaptive card selection for Learn Mode:
- Weighted random choice over unmastered cards
- Weights driven by per-card history (errors, streaks, recency)
- Progress update and mastery determination

This is not a spaced repetition scheduler: there are no review intervals.
A card is mastered once it has been answered correctly `mastery_goal`
times in a row within the session.
"""

from __future__ import annotations

import math
import random
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from typing import Protocol

# =============================================================================
# Data Classes
# =============================================================================

DEFAULT_MASTERY_GOAL = 2
INITIAL_PRIORITY = 100


@dataclass
class CardProgress:
    """Per-card performance counters scoped to one learn session."""

    id: str
    flashcard_id: str
    correct_streak: int = 0
    total_correct: int = 0
    total_incorrect: int = 0
    mastered: bool = False
    last_seen: datetime | None = None
    priority: int = INITIAL_PRIORITY

    @property
    def attempts(self) -> int:
        """Number of answers submitted for this card."""
        return self.total_correct + self.total_incorrect


@dataclass
class LearnCard:
    """A flashcard together with its progress record."""

    id: str
    question: str | None
    answer: str | None
    progress: CardProgress

    @property
    def has_content(self) -> bool:
        return bool(self.question) and bool(self.answer)


@dataclass
class ProgressSummary:
    """Mastery totals for a set of cards."""

    mastered_count: int
    total_count: int
    percent_complete: int

    def to_dict(self) -> dict[str, int]:
        return {
            "mastered_count": self.mastered_count,
            "total_count": self.total_count,
            "percent_complete": self.percent_complete,
        }


@dataclass
class WeightConfig:
    """Constants of the selection weight formula."""

    base_weight: int = 100
    incorrect_bonus: int = 50
    streak_penalty: int = 20
    correct_penalty: int = 10
    recency_window: timedelta = field(default_factory=lambda: timedelta(minutes=2))
    recency_factor: float = 0.3
    recency_floor: int = 10
    min_weight: int = 1

    # Priority bounds
    priority_min: int = 10
    priority_max: int = 200
    priority_correct_step: int = 20
    priority_incorrect_step: int = 50


class RandomSource(Protocol):
    """Anything that can supply a uniform draw in [0, 1)."""

    def random(self) -> float: ...


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values."""
    return int(math.floor(value + 0.5))


# =============================================================================
# Scheduler
# =============================================================================


class LearnModeScheduler:
    """
    Stateless decision functions for Learn Mode.

    Operates on a caller-owned snapshot of cards and progress. The only
    sources of non-determinism are the random draw in select_next_card and
    the clock, both injectable.
    """

    def __init__(
        self,
        mastery_goal: int = DEFAULT_MASTERY_GOAL,
        rng: RandomSource | None = None,
        clock: Callable[[], datetime] | None = None,
        config: WeightConfig | None = None,
    ):
        """
        Initialize the scheduler.

        Args:
            mastery_goal: Consecutive correct answers needed for mastery
            rng: Uniform random source (defaults to a fresh random.Random)
            clock: Returns the current time (defaults to UTC now)
            config: Weight constants (uses defaults if None)
        """
        self.mastery_goal = mastery_goal
        self.rng = rng or random.Random()
        self.clock = clock or _utcnow
        self.config = config or WeightConfig()

    def calculate_weight(self, progress: CardProgress, now: datetime | None = None) -> int | float:
        """
        Compute the unnormalized selection weight of one card.

        Errors raise the weight, streaks and overall success lower it, and a
        card answered within the recency window is damped so it does not
        repeat immediately. The result is always at least 1.
        """
        cfg = self.config
        weight: int | float = cfg.base_weight

        weight += progress.total_incorrect * cfg.incorrect_bonus
        weight -= progress.correct_streak * cfg.streak_penalty
        if progress.total_correct > 0:
            weight -= progress.total_correct * cfg.correct_penalty

        if progress.last_seen is not None:
            now = now or self.clock()
            if _as_utc(now) - _as_utc(progress.last_seen) < cfg.recency_window:
                weight = max(weight * cfg.recency_factor, cfg.recency_floor)

        return max(weight, cfg.min_weight)

    def select_next_card(self, cards: Sequence[LearnCard]) -> LearnCard | None:
        """
        Pick the next card to present.

        Args:
            cards: Cards with their current progress, in any order

        Returns:
            An unmastered card drawn proportionally to its weight, or None
            when every card is mastered
        """
        unmastered = [card for card in cards if not card.progress.mastered]
        if not unmastered:
            return None

        now = self.clock()
        weighted = [(card, self.calculate_weight(card.progress, now)) for card in unmastered]
        total_weight = sum(weight for _, weight in weighted)

        remainder = self.rng.random() * total_weight
        for card, weight in weighted:
            remainder -= weight
            if remainder <= 0:
                return card

        # Float accumulation can leave a sliver of remainder
        return unmastered[0]

    def update_progress(self, progress: CardProgress, is_correct: bool) -> CardProgress:
        """
        Apply one answer to a progress record.

        Args:
            progress: Current progress (not modified)
            is_correct: Whether the answer was correct

        Returns:
            New CardProgress with updated counters, mastery and priority
        """
        cfg = self.config

        if is_correct:
            streak = progress.correct_streak + 1
            updated = replace(
                progress,
                correct_streak=streak,
                total_correct=progress.total_correct + 1,
                mastered=progress.mastered or streak >= self.mastery_goal,
                priority=max(progress.priority - cfg.priority_correct_step, cfg.priority_min),
            )
        else:
            updated = replace(
                progress,
                correct_streak=0,
                total_incorrect=progress.total_incorrect + 1,
                mastered=False,
                priority=min(progress.priority + cfg.priority_incorrect_step, cfg.priority_max),
            )

        updated.last_seen = self.clock()
        return updated

    def is_session_complete(self, cards: Sequence[LearnCard]) -> bool:
        """True when every card is mastered."""
        return all(card.progress.mastered for card in cards)

    def calculate_progress(self, cards: Sequence[LearnCard]) -> ProgressSummary:
        """Count mastered cards and the rounded completion percentage."""
        mastered_count = sum(1 for card in cards if card.progress.mastered)
        total_count = len(cards)
        percent = round_half_up(mastered_count / total_count * 100) if total_count > 0 else 0
        return ProgressSummary(
            mastered_count=mastered_count,
            total_count=total_count,
            percent_complete=percent,
        )

    @staticmethod
    def check_answer(user_answer: str, correct_answer: str) -> bool:
        """Compare a typed answer ignoring case, outer whitespace and punctuation."""
        return normalize_answer(user_answer) == normalize_answer(correct_answer)


# ASCII word characters; accented letters are stripped like punctuation
_NON_WORD = re.compile(r"[^A-Za-z0-9_\s]")


def normalize_answer(text: str) -> str:
    """Lower-case, trim, then strip everything but word characters and whitespace."""
    return _NON_WORD.sub("", text.lower().strip())
