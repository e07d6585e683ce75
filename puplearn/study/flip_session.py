"""
Flip card deck for self-graded study.

The learner flips each card and marks it right or wrong. Results are kept
per card (re-marking overwrites), and the cards marked wrong can be turned
into a new deck for another pass.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field

from puplearn.learning.scheduler import RandomSource


@dataclass
class FlipCard:
    """A card in the flip deck."""
    id: str
    question: str
    answer: str


@dataclass
class FlipSummary:
    """Totals for a finished (or abandoned) flip pass."""
    total_cards: int
    correct_cards: int
    wrong_cards: int
    results: dict[str, bool] = field(default_factory=dict)

    @property
    def accuracy(self) -> int:
        marked = self.correct_cards + self.wrong_cards
        return round(self.correct_cards / marked * 100) if marked else 0


class FlipDeck:
    """
    Ordered deck with a cursor and per-card results.

    Pure in-memory state; persisting a finished pass is the job of
    StudyService.record_session.
    """

    def __init__(self, cards: list[FlipCard], restudy: bool = False):
        self.cards = list(cards)
        self.index = 0
        self.flipped = False
        self.results: dict[str, bool] = {}
        self.restudy = restudy

    def __len__(self) -> int:
        return len(self.cards)

    @property
    def current(self) -> FlipCard | None:
        if not self.cards:
            return None
        return self.cards[self.index]

    @property
    def is_last(self) -> bool:
        return self.index >= len(self.cards) - 1

    @property
    def is_finished(self) -> bool:
        """Every card has a result."""
        return bool(self.cards) and all(card.id in self.results for card in self.cards)

    def flip(self) -> bool:
        self.flipped = not self.flipped
        return self.flipped

    def mark(self, is_correct: bool) -> None:
        card = self.current
        if card is None:
            return
        self.results[card.id] = is_correct

    def next(self) -> FlipCard | None:
        if self.is_last:
            return None
        self.index += 1
        self.flipped = False
        return self.current

    def previous(self) -> FlipCard | None:
        if self.index == 0:
            return None
        self.index -= 1
        self.flipped = False
        return self.current

    def shuffle(self, rng: RandomSource | None = None) -> None:
        """Fisher-Yates shuffle of the deck; resets the cursor."""
        rng = rng or random.Random()
        cards = self.cards
        for i in range(len(cards) - 1, 0, -1):
            j = int(rng.random() * (i + 1))
            cards[i], cards[j] = cards[j], cards[i]
        self.index = 0
        self.flipped = False

    def wrong_cards(self) -> list[FlipCard]:
        return [card for card in self.cards if self.results.get(card.id) is False]

    def restudy_wrong(self) -> FlipDeck | None:
        """New deck holding only the cards marked wrong, or None if there are none."""
        wrong = self.wrong_cards()
        if not wrong:
            return None
        return FlipDeck(wrong, restudy=True)

    def summary(self) -> FlipSummary:
        correct = sum(1 for value in self.results.values() if value)
        return FlipSummary(
            total_cards=len(self.cards),
            correct_cards=correct,
            wrong_cards=len(self.results) - correct,
            results=dict(self.results),
        )
