"""Task model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from triumph_board.models.common import INT32_MAX


class TaskPriority(str, Enum):
    """Task priorities."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TaskBase(BaseModel):
    """Base task fields."""

    text: str
    due_date: Optional[datetime] = None
    priority: TaskPriority = TaskPriority.MEDIUM


class TaskCreate(TaskBase):
    """Task creation model."""

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Task text must not be empty")
        return value


class Task(TaskBase):
    """Full task model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    goal_id: str
    is_completed: bool = False
    date_created: datetime
    display_order: int = Field(default=0, ge=0, le=INT32_MAX)

    model_config = {"populate_by_name": True}
