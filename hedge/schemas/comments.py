"""Write models for comments."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_AUTHOR = "Anonymous"


class CommentCreate(BaseModel):
    """Fields accepted when posting a comment or a reply."""

    model_config = ConfigDict(str_strip_whitespace=True)

    item_id: str = Field(..., min_length=1)
    parent_id: str | None = Field(default=None, description="Comment being replied to")
    content: str = Field(..., min_length=1, max_length=10000)
    author: str | None = Field(default=None, max_length=100)

    @field_validator("parent_id", "author")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is not None and not value:
            return None
        return value

    @property
    def author_name(self) -> str:
        return self.author or DEFAULT_AUTHOR
