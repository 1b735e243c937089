"""Tests for ChangeNotifier."""
import logging

import pytest


@pytest.mark.asyncio
class TestChangeNotifier:
    """Tests for subscribing to and emitting change events."""

    async def test_emit_to_collection_subscribers(self, notifier):
        """Test only subscribers of the event's collection are called."""
        from triumph_board.models.change_event import ChangeKind

        goals_seen = []
        links_seen = []
        notifier.subscribe("goals", goals_seen.append)
        notifier.subscribe("quick_links", links_seen.append)

        await notifier.created("goals", "g1")

        assert len(goals_seen) == 1
        assert goals_seen[0].kind == ChangeKind.CREATED
        assert goals_seen[0].entity_id == "g1"
        assert links_seen == []

    async def test_subscription_order(self, notifier):
        """Test subscribers run in the order they subscribed."""
        calls = []
        notifier.subscribe("tasks", lambda event: calls.append("first"))
        notifier.subscribe("tasks", lambda event: calls.append("second"))

        await notifier.updated("tasks", "t1")

        assert calls == ["first", "second"]

    async def test_async_subscriber_is_awaited(self, notifier):
        """Test coroutine callbacks are awaited."""
        seen = []

        async def on_change(event):
            seen.append(event.entity_id)

        notifier.subscribe("knowledge_snippets", on_change)

        await notifier.deleted("knowledge_snippets", "s1")

        assert seen == ["s1"]

    async def test_unsubscribe_handle(self, notifier):
        """Test the handle returned by subscribe removes the callback."""
        seen = []
        unsubscribe = notifier.subscribe("goals", seen.append)

        unsubscribe()
        await notifier.created("goals", "g1")

        assert seen == []
        assert notifier.subscriber_count("goals") == 0

    async def test_unsubscribe_unknown_callback(self, notifier):
        """Test removing a callback that was never added is a no-op."""
        notifier.unsubscribe("goals", print)

        assert notifier.subscriber_count("goals") == 0

    async def test_failing_subscriber_is_logged(self, notifier, caplog):
        """Test a failing subscriber does not stop the others."""
        seen = []

        def broken(event):
            raise RuntimeError("boom")

        notifier.subscribe("widget_configs", broken)
        notifier.subscribe("widget_configs", seen.append)

        with caplog.at_level(logging.ERROR, logger="triumph_board.events"):
            await notifier.created("widget_configs", "w1")

        assert len(seen) == 1
        assert "boom" in caplog.text

    async def test_events_are_frozen(self):
        """Test change events cannot be modified by subscribers."""
        from pydantic import ValidationError
        from triumph_board.models.change_event import ChangeEvent, ChangeKind

        event = ChangeEvent(collection="goals", kind=ChangeKind.CREATED, entity_id="g1")

        with pytest.raises(ValidationError):
            event.entity_id = "g2"
