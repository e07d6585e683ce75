"""
Bulk import parser for pasted flashcard text.

Recognized formats, tried in this order (first one that yields cards wins):

    Q: Question?        Question | Answer      Question - Answer
    A: Answer           Term: Definition       1. Question - Answer

The order matters: "Term: definition with - a dash" is a dash-format card.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass
class ParsedFlashcard:
    question: str
    answer: str


@dataclass
class ParseResult:
    """Outcome of a parse attempt."""

    success: bool
    flashcards: list[ParsedFlashcard] = field(default_factory=list)
    error: str | None = None
    detected_format: str | None = None


NO_FORMAT_ERROR = (
    "Couldn't detect any Q/A pairs. Try using formats like:\n"
    "• Q: Question?\n  A: Answer\n"
    "• Question | Answer\n"
    "• Question - Answer\n"
    "• 1. Question? - Answer"
)

_QUESTION_LINE = re.compile(r"^Q:?\s*(.+)$", re.IGNORECASE)
_ANSWER_LINE = re.compile(r"^A:?\s*(.+)$", re.IGNORECASE)
_DASH_LINE = re.compile(r"^(.+?)\s*-\s*(.+)$")
_COLON_LINE = re.compile(r"^(.+?):\s*(.+)$")
_COLON_LABEL = re.compile(r"^(Q|A|Question|Answer)$", re.IGNORECASE)
_NUMBERED_LINE = re.compile(r"^\d+[.)]\s*(.+?)\s*[-:]\s*(.+)$")


def parse_flashcards(text: str) -> ParseResult:
    """
    Parse pasted text into question/answer pairs.

    Args:
        text: Raw multi-line text

    Returns:
        ParseResult; on success `detected_format` names the winning format
    """
    if not text or not text.strip():
        return ParseResult(success=False, error="No text provided")

    lines = [line.strip() for line in text.split("\n")]
    lines = [line for line in lines if line]
    if not lines:
        return ParseResult(success=False, error="No valid content found")

    for format_parser in FORMAT_PARSERS:
        result = format_parser(lines)
        if result.success and result.flashcards:
            return result

    return ParseResult(success=False, error=NO_FORMAT_ERROR)


def _result(flashcards: list[ParsedFlashcard], detected_format: str) -> ParseResult:
    return ParseResult(
        success=len(flashcards) > 0,
        flashcards=flashcards,
        detected_format=detected_format,
    )


def try_parse_qa_format(lines: list[str]) -> ParseResult:
    flashcards = []
    current_question = ""

    for line in lines:
        q_match = _QUESTION_LINE.match(line)
        a_match = _ANSWER_LINE.match(line)

        if q_match:
            current_question = q_match.group(1).strip()
        elif a_match and current_question:
            flashcards.append(ParsedFlashcard(current_question, a_match.group(1).strip()))
            current_question = ""

    return _result(flashcards, "Q:/A: format")


def try_parse_pipe_format(lines: list[str]) -> ParseResult:
    flashcards = []

    for line in lines:
        parts = line.split("|")
        if len(parts) >= 2:
            question = parts[0].strip()
            answer = "|".join(parts[1:]).strip()
            if question and answer:
                flashcards.append(ParsedFlashcard(question, answer))

    return _result(flashcards, "Pipe (|) delimiter")


def try_parse_dash_format(lines: list[str]) -> ParseResult:
    flashcards = []

    for line in lines:
        match = _DASH_LINE.match(line)
        if match:
            question = match.group(1).strip()
            answer = match.group(2).strip()
            if len(question) > 2 and answer:
                flashcards.append(ParsedFlashcard(question, answer))

    return _result(flashcards, "Dash (-) delimiter")


def try_parse_colon_format(lines: list[str]) -> ParseResult:
    flashcards = []

    for line in lines:
        match = _COLON_LINE.match(line)
        if match:
            question = match.group(1).strip()
            answer = match.group(2).strip()
            if len(question) > 3 and answer and not _COLON_LABEL.match(question):
                flashcards.append(ParsedFlashcard(question, answer))

    return _result(flashcards, "Colon (:) delimiter")


def try_parse_numbered_format(lines: list[str]) -> ParseResult:
    flashcards = []

    for line in lines:
        match = _NUMBERED_LINE.match(line)
        if match:
            question = match.group(1).strip()
            answer = match.group(2).strip()
            if question and answer:
                flashcards.append(ParsedFlashcard(question, answer))

    return _result(flashcards, "Numbered list (1. Q - A)")


FORMAT_PARSERS: list[Callable[[list[str]], ParseResult]] = [
    try_parse_qa_format,
    try_parse_pipe_format,
    try_parse_dash_format,
    try_parse_colon_format,
    try_parse_numbered_format,
]
