"""
Integration tests for LearnService against a temporary SQLite database.

Covers session creation and resume, answer submission, completion,
missing-content handling and the restart / review-wrong flows.
"""

import threading

import pytest

from puplearn.core.errors import (
    CardContentMissingError,
    EmptyStudySetError,
    InvalidInputError,
    InvalidSessionStateError,
    NotFoundError,
)
from puplearn.learning.learn_service import LearnService


@pytest.fixture
def learn(session_factory, first_pick, clock):
    return LearnService(
        user_email="learner@example.com",
        session_factory=session_factory,
        rng=first_pick,
        clock=clock,
    )


def answer_until_done(learn, session_id, is_correct=True, limit=50):
    """Answer every presented card until the session ends; returns answers given."""
    answers = 0
    while answers < limit:
        card = learn.get_next_card(session_id)
        if card is None:
            return answers
        learn.submit_answer(session_id, card.progress.id, is_correct)
        answers += 1
    raise AssertionError("session did not finish")


# ============================================================================
# Creation
# ============================================================================


class TestCreateSession:
    def test_creates_fresh_progress_for_every_card(self, learn, capitals_set):
        snapshot = learn.create_session(capitals_set.id)

        assert snapshot.study_set_id == capitals_set.id
        assert snapshot.mastery_goal == 2
        assert snapshot.is_completed is False
        assert len(snapshot.cards) == 3
        for card in snapshot.cards:
            assert card.has_content
            assert card.progress.correct_streak == 0
            assert card.progress.total_correct == 0
            assert card.progress.total_incorrect == 0
            assert card.progress.mastered is False
            assert card.progress.priority == 100
            assert card.progress.last_seen is None

    def test_custom_mastery_goal(self, learn, capitals_set):
        assert learn.create_session(capitals_set.id, mastery_goal=3).mastery_goal == 3

    def test_rejects_goal_below_one(self, learn, capitals_set):
        with pytest.raises(InvalidInputError):
            learn.create_session(capitals_set.id, mastery_goal=0)

    def test_resumes_open_session(self, learn, capitals_set):
        first = learn.create_session(capitals_set.id)
        second = learn.create_session(capitals_set.id)
        assert second.id == first.id

    def test_completed_session_is_not_resumed(self, learn, capitals_set):
        first = learn.create_session(capitals_set.id)
        learn.mark_completed(first.id)
        assert learn.create_session(capitals_set.id).id != first.id

    def test_session_is_not_resumed_after_cards_added(self, learn, library, capitals_set):
        first = learn.create_session(capitals_set.id)
        library.add_flashcard(capitals_set.id, "Capital of Portugal?", "Lisbon")

        second = learn.create_session(capitals_set.id)
        assert second.id != first.id
        assert len(second.cards) == 4

    def test_subset(self, learn, capitals_set):
        wanted = capitals_set.flashcards[1].id
        snapshot = learn.create_session(capitals_set.id, flashcard_ids=[wanted, "not-in-set"])

        assert [card.id for card in snapshot.cards] == [wanted]

    def test_subset_of_unknown_cards_is_empty(self, learn, capitals_set):
        with pytest.raises(EmptyStudySetError):
            learn.create_session(capitals_set.id, flashcard_ids=["nope"])

    def test_empty_study_set(self, learn, library):
        empty = library.create_study_set("Empty")
        with pytest.raises(EmptyStudySetError):
            learn.create_session(empty.id)

    def test_unknown_study_set(self, learn):
        with pytest.raises(NotFoundError):
            learn.create_session("missing")

    def test_other_users_study_set(self, session_factory, capitals_set):
        stranger = LearnService(user_email="other@example.com", session_factory=session_factory)
        with pytest.raises(NotFoundError):
            stranger.create_session(capitals_set.id)


# ============================================================================
# Answering
# ============================================================================


class TestAnswers:
    def test_wrong_answer_is_persisted(self, learn, capitals_set):
        snapshot = learn.create_session(capitals_set.id)
        card = learn.get_next_card(snapshot.id)

        updated = learn.submit_answer(snapshot.id, card.progress.id, False)

        assert updated.total_incorrect == 1
        assert updated.priority == 150
        stored = learn.get_session(snapshot.id).find_by_progress(card.progress.id)
        assert stored.progress.total_incorrect == 1
        assert stored.progress.correct_streak == 0
        assert stored.progress.last_seen is not None

    def test_two_correct_answers_master_a_card(self, learn, capitals_set):
        snapshot = learn.create_session(capitals_set.id)
        card = learn.get_next_card(snapshot.id)

        learn.submit_answer(snapshot.id, card.progress.id, True)
        updated = learn.submit_answer(snapshot.id, card.progress.id, True)

        assert updated.mastered is True
        assert learn.get_session(snapshot.id).is_completed is False

    def test_mastering_every_card_completes_session(self, learn, capitals_set):
        snapshot = learn.create_session(capitals_set.id)

        answers = answer_until_done(learn, snapshot.id)

        assert answers == 6
        stored = learn.get_session(snapshot.id)
        assert stored.is_completed is True
        assert all(card.progress.mastered for card in stored.cards)
        assert learn.get_next_card(snapshot.id) is None

    def test_submitting_spends_no_random_draw(self, learn, first_pick, capitals_set):
        snapshot = learn.create_session(capitals_set.id)
        card = learn.get_next_card(snapshot.id)

        learn.submit_answer(snapshot.id, card.progress.id, False)

        assert first_pick.calls == 1

    def test_completed_session_rejects_answers(self, learn, capitals_set):
        snapshot = learn.create_session(capitals_set.id)
        progress_id = snapshot.cards[0].progress.id
        learn.mark_completed(snapshot.id)

        with pytest.raises(InvalidSessionStateError):
            learn.submit_answer(snapshot.id, progress_id, True)

    def test_progress_from_another_session_is_rejected(self, learn, capitals_set):
        subset = learn.create_session(capitals_set.id, flashcard_ids=[capitals_set.flashcards[0].id])
        full = learn.create_session(capitals_set.id)

        with pytest.raises(InvalidSessionStateError):
            learn.submit_answer(full.id, subset.cards[0].progress.id, True)

    def test_unknown_session(self, learn):
        with pytest.raises(NotFoundError):
            learn.submit_answer("missing", "p", True)

    def test_other_user_cannot_answer(self, learn, session_factory, capitals_set):
        snapshot = learn.create_session(capitals_set.id)
        stranger = LearnService(user_email="other@example.com", session_factory=session_factory)

        with pytest.raises(NotFoundError):
            stranger.submit_answer(snapshot.id, snapshot.cards[0].progress.id, True)


class TestMissingContent:
    def test_deleted_flashcard_closes_session(self, learn, library, capitals_set):
        snapshot = learn.create_session(capitals_set.id)
        # first_pick always selects the first unmastered card
        library.delete_flashcard(snapshot.cards[0].id)

        with pytest.raises(CardContentMissingError) as exc_info:
            learn.get_next_card(snapshot.id)

        assert exc_info.value.flashcard_id == snapshot.cards[0].id
        assert learn.get_session(snapshot.id).is_completed is True

    def test_error_names_the_selected_card(self, session_factory, library, capitals_set, clock, make_rng):
        # three fresh cards weigh 100 each; r = 150 selects the second
        learn = LearnService(
            user_email="learner@example.com",
            session_factory=session_factory,
            rng=make_rng(0.5),
            clock=clock,
        )
        snapshot = learn.create_session(capitals_set.id)
        library.delete_flashcard(snapshot.cards[0].id)
        library.delete_flashcard(snapshot.cards[1].id)

        with pytest.raises(CardContentMissingError) as exc_info:
            learn.get_next_card(snapshot.id)

        assert exc_info.value.flashcard_id == snapshot.cards[1].id


# ============================================================================
# Lifecycle flows
# ============================================================================


class TestLifecycle:
    def test_delete_session(self, learn, capitals_set):
        snapshot = learn.create_session(capitals_set.id)
        learn.delete_session(snapshot.id)

        with pytest.raises(NotFoundError):
            learn.get_session(snapshot.id)

    def test_restart_discards_progress(self, learn, capitals_set):
        snapshot = learn.create_session(capitals_set.id, mastery_goal=3)
        card = learn.get_next_card(snapshot.id)
        learn.submit_answer(snapshot.id, card.progress.id, True)

        restarted = learn.restart_session(snapshot.id)

        assert restarted.id != snapshot.id
        assert restarted.mastery_goal == 3
        assert len(restarted.cards) == 3
        assert all(c.progress.total_correct == 0 for c in restarted.cards)
        with pytest.raises(NotFoundError):
            learn.get_session(snapshot.id)

    def test_review_wrong_keeps_only_missed_cards(self, learn, capitals_set):
        snapshot = learn.create_session(capitals_set.id)
        missed = learn.get_next_card(snapshot.id)
        learn.submit_answer(snapshot.id, missed.progress.id, False)
        answer_until_done(learn, snapshot.id)

        review = learn.review_wrong(snapshot.id)

        assert [card.id for card in review.cards] == [missed.id]
        assert review.is_completed is False
        with pytest.raises(NotFoundError):
            learn.get_session(snapshot.id)

    def test_review_wrong_keeps_session_when_missed_cards_are_gone(self, learn, library, capitals_set):
        snapshot = learn.create_session(capitals_set.id)
        missed = learn.get_next_card(snapshot.id)
        learn.submit_answer(snapshot.id, missed.progress.id, False)
        library.delete_flashcard(missed.id)

        with pytest.raises(EmptyStudySetError):
            learn.review_wrong(snapshot.id)

        kept = learn.get_session(snapshot.id)
        assert kept.find_by_progress(missed.progress.id).progress.total_incorrect == 1

    def test_restart_keeps_session_when_set_is_emptied(self, learn, library, capitals_set):
        snapshot = learn.create_session(capitals_set.id)
        for card in capitals_set.flashcards:
            library.delete_flashcard(card.id)

        with pytest.raises(EmptyStudySetError):
            learn.restart_session(snapshot.id)

        assert learn.get_session(snapshot.id).id == snapshot.id

    def test_review_wrong_without_misses_restarts_everything(self, learn, capitals_set):
        snapshot = learn.create_session(capitals_set.id)
        answer_until_done(learn, snapshot.id)

        review = learn.review_wrong(snapshot.id)

        assert review.id != snapshot.id
        assert len(review.cards) == 3


# ============================================================================
# Concurrency
# ============================================================================


class TestConcurrentAnswers:
    """Answer submissions for one session must not overwrite each other."""

    def test_parallel_submissions_are_all_counted(self, learn, capitals_set):
        snapshot = learn.create_session(capitals_set.id, mastery_goal=50)
        progress_id = snapshot.cards[0].progress.id
        rounds = 10
        start = threading.Barrier(2)
        errors = []

        def answer(is_correct):
            try:
                start.wait(timeout=10)
                for _ in range(rounds):
                    learn.submit_answer(snapshot.id, progress_id, is_correct)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=answer, args=(flag,)) for flag in (True, False)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert errors == []
        stored = learn.get_session(snapshot.id).find_by_progress(progress_id).progress
        assert stored.total_correct == rounds
        assert stored.total_incorrect == rounds
        assert stored.attempts == 2 * rounds
