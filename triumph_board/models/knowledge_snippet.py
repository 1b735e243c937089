"""Knowledge snippet model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from triumph_board.models.common import INT64_MAX, blank_to_none


def split_tags(tags: Optional[str]) -> list[str]:
    """Split a comma separated tag string, dropping empty entries."""
    if not tags:
        return []
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


def join_tags(tags: list[str]) -> Optional[str]:
    """Join tags back into the stored comma separated form."""
    cleaned = [tag.strip() for tag in tags if tag.strip()]
    return ", ".join(cleaned) if cleaned else None


class KnowledgeSnippetBase(BaseModel):
    """Base knowledge snippet fields."""

    title: Optional[str] = None
    content: str
    language_or_type: Optional[str] = None
    tags: Optional[str] = None  # comma separated

    @field_validator("title", "language_or_type", "tags")
    @classmethod
    def empty_text_is_none(cls, value: Optional[str]) -> Optional[str]:
        return blank_to_none(value)

    @property
    def tags_list(self) -> list[str]:
        return split_tags(self.tags)


class KnowledgeSnippetCreate(KnowledgeSnippetBase):
    """Knowledge snippet creation model. Content is required."""

    is_favorite: bool = False

    @field_validator("content")
    @classmethod
    def content_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Content must not be empty")
        return value


class KnowledgeSnippetUpdate(BaseModel):
    """
    Knowledge snippet update model - all fields optional.

    A blank title, language or tag string clears the field; content may be
    left out but never set to empty.
    """

    title: Optional[str] = None
    content: Optional[str] = None
    language_or_type: Optional[str] = None
    tags: Optional[str] = None
    is_favorite: Optional[bool] = None

    @field_validator("content")
    @classmethod
    def content_not_empty(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Content must not be empty")
        return value


class KnowledgeSnippet(KnowledgeSnippetBase):
    """Full knowledge snippet model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    date_created: datetime
    last_accessed: Optional[datetime] = None
    is_favorite: bool = False
    display_order: int = Field(default=0, ge=0, le=INT64_MAX)

    model_config = {"populate_by_name": True}
