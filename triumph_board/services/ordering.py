"""Display order assignment for new entities."""
from typing import Optional

from pymongo import DESCENDING

from triumph_board.exceptions import DisplayOrderOverflowError
from triumph_board.models.common import INT32_MAX


async def next_display_order(
    collection,
    scope: Optional[dict] = None,
    maximum: int = INT32_MAX,
    session=None,
) -> int:
    """
    Compute the display order for a new entity.

    Takes the highest display_order in the collection (restricted to
    ``scope``, e.g. the tasks of one goal) and returns it plus one, or 0
    when nothing matches. Query-then-increment is not atomic: callers must
    be the single writer of the collection.

    Args:
        collection: MongoDB collection to scan
        scope: Optional filter limiting the sub-collection
        maximum: Largest value the display_order field may hold
        session: Optional client session for transactional reads

    Returns:
        Next display order

    Raises:
        DisplayOrderOverflowError: If the next value exceeds ``maximum``
    """
    last = await collection.find_one(
        scope or {},
        projection={"display_order": 1},
        sort=[("display_order", DESCENDING)],
        session=session,
    )

    if not last or last.get("display_order") is None:
        return 0

    next_order = int(last["display_order"]) + 1
    if next_order > maximum:
        raise DisplayOrderOverflowError(
            f"Display order {next_order} exceeds the maximum of {maximum}"
        )
    return next_order
