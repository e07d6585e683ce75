"""
Request models for library operations.

Validated with pydantic before anything touches the database.
"""
from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class FlashcardInput(BaseModel):
    """A single question/answer pair."""

    question: str = Field(..., min_length=1, description="Front of the card")
    answer: str = Field(..., min_length=1, description="Back of the card")

    @field_validator("question", "answer")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class BulkFlashcardsRequest(BaseModel):
    """Payload for adding many cards at once."""

    flashcards: list[FlashcardInput] = Field(
        ..., min_length=1, description="At least one flashcard is required"
    )


class StudySetInput(BaseModel):
    title: str = Field(..., min_length=1)
    description: str | None = None
    folder_id: str | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value
