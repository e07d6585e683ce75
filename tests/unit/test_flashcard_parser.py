"""
Unit tests for the bulk import parser.

Each format is checked on its own, then the priority order is checked on
lines that more than one format could claim.
"""

import pytest

from puplearn.library.flashcard_parser import (
    NO_FORMAT_ERROR,
    parse_flashcards,
    try_parse_colon_format,
    try_parse_dash_format,
    try_parse_numbered_format,
)


class TestEmptyInput:
    @pytest.mark.parametrize("text", ["", "   ", "\n\n"])
    def test_blank_text_is_rejected(self, text):
        result = parse_flashcards(text)
        assert result.success is False
        assert result.error == "No text provided"

    def test_unrecognized_text_lists_formats(self):
        result = parse_flashcards("just some words\nwithout separators")
        assert result.success is False
        assert result.error == NO_FORMAT_ERROR


class TestFormats:
    def test_qa_blocks(self):
        text = """
        Q: What is 2 + 2?
        A: 4

        q What color is the sky?
        a Blue
        """
        result = parse_flashcards(text)

        assert result.detected_format == "Q:/A: format"
        assert [(c.question, c.answer) for c in result.flashcards] == [
            ("What is 2 + 2?", "4"),
            ("What color is the sky?", "Blue"),
        ]

    def test_answer_without_question_is_ignored(self):
        result = parse_flashcards("A: orphan\nQ: Real?\nA: Yes")
        assert [(c.question, c.answer) for c in result.flashcards] == [("Real?", "Yes")]

    def test_pipe_keeps_extra_pipes_in_answer(self):
        result = parse_flashcards("Bitwise or | a | b")
        assert result.detected_format == "Pipe (|) delimiter"
        assert result.flashcards[0].answer == "a | b"

    def test_dash(self):
        result = parse_flashcards("Hund - dog\nKatze - cat")
        assert result.detected_format == "Dash (-) delimiter"
        assert result.flashcards[1].question == "Katze"
        assert result.flashcards[1].answer == "cat"

    def test_dash_requires_question_longer_than_two_characters(self):
        result = try_parse_dash_format(["ab - too short", "abc - ok"])
        assert [c.question for c in result.flashcards] == ["abc"]

    def test_colon(self):
        result = parse_flashcards("Photosynthesis: how plants make food")
        assert result.detected_format == "Colon (:) delimiter"
        assert result.flashcards[0].answer == "how plants make food"

    def test_colon_skips_labels_and_short_terms(self):
        result = try_parse_colon_format(["Question: what?", "abc: too short", "Mitosis: cell division"])
        assert [c.question for c in result.flashcards] == ["Mitosis"]

    def test_numbered_list_strips_number(self):
        result = try_parse_numbered_format(["1. Largest planet? - Jupiter", "2) Smallest: Mercury"])
        assert [(c.question, c.answer) for c in result.flashcards] == [
            ("Largest planet?", "Jupiter"),
            ("Smallest", "Mercury"),
        ]

    def test_line_without_delimiter_is_not_a_card(self):
        result = parse_flashcards("1) Largest planet? Jupiter")
        assert result.success is False

    def test_blank_lines_and_whitespace_are_dropped(self):
        result = parse_flashcards("\n   Sun | star   \n\n Moon | satellite\n")
        assert [(c.question, c.answer) for c in result.flashcards] == [
            ("Sun", "star"),
            ("Moon", "satellite"),
        ]


class TestPriority:
    """The first format in the list wins, not the best one."""

    def test_dash_beats_colon(self):
        result = parse_flashcards("Term: definition with - a dash")

        assert result.detected_format == "Dash (-) delimiter"
        assert result.flashcards[0].question == "Term: definition with"
        assert result.flashcards[0].answer == "a dash"

    def test_pipe_beats_dash(self):
        result = parse_flashcards("well-known | famous")
        assert result.detected_format == "Pipe (|) delimiter"

    def test_numbered_lines_are_claimed_by_dash_first(self):
        result = parse_flashcards("1. Capital of France? - Paris")
        assert result.detected_format == "Dash (-) delimiter"
        assert result.flashcards[0].question == "1. Capital of France?"

    def test_numbered_colon_lines_are_claimed_by_colon_first(self):
        result = parse_flashcards("1. Capital of France: Paris")
        assert result.detected_format == "Colon (:) delimiter"
        assert result.flashcards[0].question == "1. Capital of France"

    def test_qa_beats_colon(self):
        result = parse_flashcards("Q: Speed of light?\nA: 299,792 km/s")
        assert result.detected_format == "Q:/A: format"
