"""Write models for items."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_TAGS = 20


class ItemCreate(BaseModel):
    """Fields accepted when submitting a new item."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    link: str | None = Field(default=None, max_length=2000)
    image: str | None = Field(default=None, max_length=2000)
    extract: str | None = Field(
        default=None, max_length=5000, description="Serialized rich-text document"
    )
    owner_comment: str = Field(..., min_length=1, max_length=10000)
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, value: list[str]) -> list[str]:
        """Trim whitespace, drop empty values, and de-duplicate tag names.

        Names are case-sensitive, matching the unique index on ``tags.name``.
        """
        normalized: list[str] = []
        seen: set[str] = set()
        for name in value:
            cleaned = name.strip()
            if not cleaned:
                continue
            if cleaned in seen:
                continue
            seen.add(cleaned)
            normalized.append(cleaned)
        return normalized


class ItemUpdate(BaseModel):
    """Partial update; only fields explicitly set are written."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=1, max_length=200)
    link: str | None = Field(default=None, max_length=2000)
    image: str | None = Field(default=None, max_length=2000)
    extract: str | None = Field(default=None, max_length=5000)
    owner_comment: str | None = Field(default=None, min_length=1, max_length=10000)

    @field_validator("title", "owner_comment")
    @classmethod
    def reject_explicit_null(cls, value: str | None) -> str | None:
        if value is None:
            raise ValueError("Field cannot be cleared")
        return value
