"""Change notification model definitions."""
from enum import Enum

from pydantic import BaseModel


class ChangeKind(str, Enum):
    """What happened to an entity."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class ChangeEvent(BaseModel):
    """A persisted change to one entity of a collection."""

    collection: str
    kind: ChangeKind
    entity_id: str

    model_config = {"frozen": True}
