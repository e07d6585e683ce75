"""
Unit tests for FlipDeck (self-graded flip cards).
"""

import pytest

from puplearn.study.flip_session import FlipCard, FlipDeck, FlipSummary


@pytest.fixture
def deck():
    return FlipDeck([FlipCard(card_id, f"Q{card_id}", f"A{card_id}") for card_id in ("a", "b", "c")])


class TestNavigation:
    def test_starts_on_first_card_face_down(self, deck):
        assert deck.current.id == "a"
        assert deck.flipped is False

    def test_flip_toggles(self, deck):
        assert deck.flip() is True
        assert deck.flip() is False

    def test_next_and_previous(self, deck):
        deck.flip()
        assert deck.next().id == "b"
        assert deck.flipped is False
        assert deck.previous().id == "a"
        assert deck.previous() is None

    def test_next_stops_at_end(self, deck):
        deck.next()
        deck.next()
        assert deck.is_last
        assert deck.next() is None
        assert deck.current.id == "c"

    def test_empty_deck(self):
        deck = FlipDeck([])
        assert deck.current is None
        assert deck.is_finished is False
        deck.mark(True)
        assert deck.results == {}


class TestResults:
    def test_marking_every_card_finishes(self, deck):
        for _ in range(len(deck)):
            deck.mark(True)
            deck.next()
        assert deck.is_finished

    def test_remark_overwrites(self, deck):
        deck.mark(False)
        deck.mark(True)
        assert deck.results == {"a": True}

    def test_summary_counts(self, deck):
        deck.mark(True)
        deck.next()
        deck.mark(False)
        deck.next()
        deck.mark(True)

        summary = deck.summary()
        assert summary.total_cards == 3
        assert summary.correct_cards == 2
        assert summary.wrong_cards == 1
        assert summary.accuracy == 67

    def test_summary_of_abandoned_pass(self, deck):
        deck.mark(False)
        summary = deck.summary()
        assert summary.total_cards == 3
        assert summary.wrong_cards == 1
        assert summary.accuracy == 0

    def test_accuracy_without_marks(self):
        assert FlipSummary(total_cards=3, correct_cards=0, wrong_cards=0).accuracy == 0


class TestRestudy:
    def test_restudy_holds_only_wrong_cards(self, deck):
        deck.mark(False)
        deck.next()
        deck.mark(True)
        deck.next()
        deck.mark(False)

        restudy = deck.restudy_wrong()
        assert restudy.restudy is True
        assert [card.id for card in restudy.cards] == ["a", "c"]
        assert restudy.results == {}

    def test_no_restudy_without_misses(self, deck):
        deck.mark(True)
        assert deck.restudy_wrong() is None


class TestShuffle:
    def test_shuffle_is_a_permutation(self, deck, make_rng):
        deck.next()
        deck.flip()
        deck.shuffle(make_rng(0.0))

        assert [card.id for card in deck.cards] == ["b", "c", "a"]
        assert deck.index == 0
        assert deck.flipped is False

    def test_shuffle_with_real_random_keeps_cards(self, deck):
        import random

        deck.shuffle(random.Random(7))
        assert sorted(card.id for card in deck.cards) == ["a", "b", "c"]
