"""Dashboard widget configuration model definitions."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from triumph_board.models.common import INT32_MAX


class WidgetType(str, Enum):
    """Dashboard panel kinds."""

    QUICK_LINKS = "quicklinks"
    TRIUMPH_GOALS = "triumphgoals"
    KNOWLEDGE_BYTES = "knowledgebytes"


class WidgetConfigCreate(BaseModel):
    """Widget configuration creation model."""

    type: WidgetType
    payload: Optional[bytes] = None


class WidgetConfig(WidgetConfigCreate):
    """Full widget configuration model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    display_order: int = Field(default=0, ge=0, le=INT32_MAX)

    model_config = {"populate_by_name": True}
