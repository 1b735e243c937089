"""Per-collection change notification for the presentation layer."""
import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Union

from triumph_board.models.change_event import ChangeEvent, ChangeKind

logger = logging.getLogger(__name__)

Subscriber = Callable[[ChangeEvent], Union[None, Awaitable[None]]]


class ChangeNotifier:
    """
    Delivers ChangeEvents to the subscribers of a collection.

    Callbacks may be plain functions or coroutine functions. They run in
    subscription order after the change has been persisted.
    """

    def __init__(self):
        self._subscribers: dict[str, list[Subscriber]] = defaultdict(list)

    def subscribe(self, collection: str, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for changes to a collection.

        Returns:
            A function that removes the subscription
        """
        self._subscribers[collection].append(callback)

        def unsubscribe() -> None:
            self.unsubscribe(collection, callback)

        return unsubscribe

    def unsubscribe(self, collection: str, callback: Subscriber) -> None:
        """Remove a callback; unknown callbacks are ignored."""
        subscribers = self._subscribers.get(collection, [])
        if callback in subscribers:
            subscribers.remove(callback)

    def subscriber_count(self, collection: str) -> int:
        return len(self._subscribers.get(collection, []))

    async def emit(self, event: ChangeEvent) -> None:
        """Deliver an event. A failing subscriber does not stop the others."""
        for callback in list(self._subscribers.get(event.collection, [])):
            try:
                result: Any = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Subscriber {callback!r} failed handling {event.kind.value} "
                    f"on {event.collection}/{event.entity_id}: {e}"
                )

    async def created(self, collection: str, entity_id: str) -> None:
        await self.emit(ChangeEvent(collection=collection, kind=ChangeKind.CREATED, entity_id=entity_id))

    async def updated(self, collection: str, entity_id: str) -> None:
        await self.emit(ChangeEvent(collection=collection, kind=ChangeKind.UPDATED, entity_id=entity_id))

    async def deleted(self, collection: str, entity_id: str) -> None:
        await self.emit(ChangeEvent(collection=collection, kind=ChangeKind.DELETED, entity_id=entity_id))
