from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from ..search.sanitize import sanitize_text


def _now() -> datetime:
    return datetime.now(timezone.utc)


class LocalReview(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(default="", max_length=2000)
    criteria_ratings: dict[str, int] = Field(default_factory=dict)
    author: str = Field(default="", max_length=100)
    created_at: datetime = Field(default_factory=_now)

    @field_validator("comment", "author")
    @classmethod
    def _strip_markup(cls, value: str) -> str:
        return sanitize_text(value)


class LocalNote(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)
    created_at: datetime = Field(default_factory=_now)

    @field_validator("text")
    @classmethod
    def _strip_markup(cls, value: str) -> str:
        cleaned = sanitize_text(value)
        if not cleaned:
            raise ValueError("Note is empty after removing markup")
        return cleaned


class CustomCategories(BaseModel):
    categories: list[str] = Field(default_factory=list)


class NotificationPrompt(BaseModel):
    dismissed: bool = True
