"""Tests for QuickLinkService."""
import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock


@pytest.mark.asyncio
class TestQuickLinkServiceCreate:
    """Tests for creating quick links."""

    async def test_create_quick_link_success(self, mock_db_factory, notifier, recorded_events):
        """Test successful quick link creation."""
        from triumph_board.services.quick_link_service import QuickLinkService
        from triumph_board.models.quick_link import QuickLinkCreate

        mock_links = AsyncMock()
        mock_links.find_one.return_value = None
        mock_db = mock_db_factory({"quick_links": mock_links})

        service = QuickLinkService(mock_db, notifier)
        link = await service.create_quick_link(
            QuickLinkCreate(title="Docs", url="https://docs.python.org"),
        )

        assert link.title == "Docs"
        assert link.url == "https://docs.python.org"
        assert link.display_order == 0
        assert len(link.id) == 36
        assert isinstance(link.date_added, datetime)

        inserted = mock_links.insert_one.call_args.args[0]
        assert inserted["_id"] == link.id
        assert recorded_events[0].entity_id == link.id

    async def test_create_quick_link_appends(self, mock_db_factory, notifier):
        """Test a new link goes after the current last one."""
        from triumph_board.services.quick_link_service import QuickLinkService
        from triumph_board.models.quick_link import QuickLinkCreate

        mock_links = AsyncMock()
        mock_links.find_one.return_value = {"_id": "x", "display_order": 6}
        mock_db = mock_db_factory({"quick_links": mock_links})

        service = QuickLinkService(mock_db, notifier)
        link = await service.create_quick_link(
            QuickLinkCreate(title="Mail", url="https://mail.example.com"),
        )

        assert link.display_order == 7

    async def test_sequential_display_orders(self, fake_db, fake_collections, notifier):
        """Test N creations get display orders 0..N-1 in creation order."""
        from triumph_board.services.quick_link_service import QuickLinkService
        from triumph_board.models.quick_link import QuickLinkCreate

        service = QuickLinkService(fake_db, notifier)
        links = []
        for n in range(5):
            links.append(await service.create_quick_link(
                QuickLinkCreate(title=f"Link {n}", url=f"https://example.com/{n}"),
            ))

        assert [link.display_order for link in links] == [0, 1, 2, 3, 4]
        assert len({link.id for link in links}) == 5
        assert len(fake_collections["quick_links"].docs) == 5


@pytest.mark.asyncio
class TestQuickLinkServiceList:
    """Tests for listing quick links."""

    async def test_list_quick_links_sorted(self, mock_db_factory, cursor_factory):
        """Test links are listed by display order."""
        from triumph_board.services.quick_link_service import QuickLinkService

        mock_links = MagicMock()
        mock_cursor = cursor_factory([
            {"_id": "a", "title": "A", "url": "https://a.example", "date_added": datetime.now(), "display_order": 0},
            {"_id": "b", "title": "B", "url": "https://b.example", "date_added": datetime.now(), "display_order": 1},
        ])
        mock_links.find.return_value = mock_cursor
        mock_db = mock_db_factory({"quick_links": mock_links})

        service = QuickLinkService(mock_db)
        links = await service.list_quick_links()

        assert [link.title for link in links] == ["A", "B"]
        mock_cursor.sort.assert_called_once_with("display_order", 1)


@pytest.mark.asyncio
class TestQuickLinkServiceDelete:
    """Tests for deleting quick links."""

    async def test_delete_quick_link_success(self, mock_db_factory, notifier, recorded_events):
        """Test deleting an existing link."""
        from triumph_board.services.quick_link_service import QuickLinkService
        from triumph_board.models.change_event import ChangeKind

        mock_links = AsyncMock()
        mock_links.delete_one.return_value = MagicMock(deleted_count=1)
        mock_db = mock_db_factory({"quick_links": mock_links})

        service = QuickLinkService(mock_db, notifier)
        await service.delete_quick_link("link-1")

        mock_links.delete_one.assert_called_once_with({"_id": "link-1"})
        assert recorded_events[0].kind == ChangeKind.DELETED

    async def test_delete_quick_link_not_found(self, mock_db_factory, notifier, recorded_events):
        """Test deleting a missing link raises."""
        from triumph_board.services.quick_link_service import QuickLinkService

        mock_links = AsyncMock()
        mock_links.delete_one.return_value = MagicMock(deleted_count=0)
        mock_db = mock_db_factory({"quick_links": mock_links})

        service = QuickLinkService(mock_db, notifier)

        with pytest.raises(ValueError, match="Quick link not found"):
            await service.delete_quick_link("missing")

        assert recorded_events == []
