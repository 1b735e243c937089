"""Quick link model definitions."""
from datetime import datetime
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from triumph_board.models.common import INT32_MAX


class QuickLinkBase(BaseModel):
    """Base quick link fields."""

    title: str
    url: str


class QuickLinkCreate(QuickLinkBase):
    """Quick link creation model."""

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title must not be empty")
        return value

    @field_validator("url")
    @classmethod
    def url_has_scheme_and_host(cls, value: str) -> str:
        value = value.strip()
        parsed = urlparse(value)
        if not parsed.scheme or not (parsed.netloc or parsed.path):
            raise ValueError("Please enter a valid URL")
        if parsed.scheme in ("http", "https") and not parsed.netloc:
            raise ValueError("Please enter a valid URL")
        return value


class QuickLink(QuickLinkBase):
    """Full quick link model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    date_added: datetime
    display_order: int = Field(default=0, ge=0, le=INT32_MAX)

    model_config = {"populate_by_name": True}
