"""Entity identifier generation."""
import uuid


def new_entity_id() -> str:
    """
    Generate a globally unique entity ID.

    IDs are UUID4 strings, assigned once at creation and stored as ``_id``.

    Examples:
        >>> len(new_entity_id())
        36
    """
    return str(uuid.uuid4())
