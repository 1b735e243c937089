"""Goal model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from triumph_board.models.common import INT32_MAX, blank_to_none


class GoalBase(BaseModel):
    """Base goal fields."""

    name: str
    description: Optional[str] = None

    @field_validator("description")
    @classmethod
    def empty_description_is_none(cls, value: Optional[str]) -> Optional[str]:
        return blank_to_none(value)


class GoalCreate(GoalBase):
    """Goal creation model."""

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Goal name must not be empty")
        return value


class GoalUpdate(BaseModel):
    """Goal update model - all fields optional."""

    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Goal name must not be empty")
        return value.strip() if value is not None else None


class Goal(GoalBase):
    """Full goal model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    date_created: datetime
    display_order: int = Field(default=0, ge=0, le=INT32_MAX)

    model_config = {"populate_by_name": True}


class GoalProgress(BaseModel):
    """Completed / total task counts for a goal. Derived, never stored."""

    goal_id: str
    completed: int = 0
    total: int = 0

    @property
    def ratio(self) -> float:
        """Fraction of tasks completed; 0.0 for a goal without tasks."""
        if self.total == 0:
            return 0.0
        return self.completed / self.total

    @property
    def percent(self) -> int:
        return int(self.ratio * 100)
