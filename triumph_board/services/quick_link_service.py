"""Quick link service - storage logic for the quick links panel."""
from datetime import datetime
from typing import Optional

from pymongo import ASCENDING

from triumph_board.database import QUICK_LINKS
from triumph_board.events import ChangeNotifier
from triumph_board.models.quick_link import QuickLink, QuickLinkCreate
from triumph_board.services.documents import convert_documents
from triumph_board.services.ordering import next_display_order
from triumph_board.utils.ids import new_entity_id


class QuickLinkService:
    """Service for handling quick link operations."""

    def __init__(self, db, notifier: Optional[ChangeNotifier] = None):
        """Initialize service with database connection."""
        self.db = db
        self.quick_links = db[QUICK_LINKS]
        self.notifier = notifier or ChangeNotifier()

    def _doc_to_link(self, doc: dict) -> QuickLink:
        """Convert database document to QuickLink model."""
        return QuickLink(
            _id=str(doc["_id"]),
            title=doc["title"],
            url=doc["url"],
            date_added=doc["date_added"],
            display_order=doc.get("display_order", 0),
        )

    async def create_quick_link(self, link_create: QuickLinkCreate) -> QuickLink:
        """
        Create a new quick link at the end of the list.

        Args:
            link_create: Quick link creation data

        Returns:
            Created quick link
        """
        link_doc = {
            "_id": new_entity_id(),
            "title": link_create.title,
            "url": link_create.url,
            "date_added": datetime.utcnow(),
            "display_order": await next_display_order(self.quick_links),
        }

        await self.quick_links.insert_one(link_doc)
        await self.notifier.created(QUICK_LINKS, link_doc["_id"])

        return self._doc_to_link(link_doc)

    async def list_quick_links(self) -> list[QuickLink]:
        """List quick links in display order."""
        cursor = self.quick_links.find({}).sort("display_order", ASCENDING)
        link_docs = await cursor.to_list(length=None)

        return convert_documents(link_docs, self._doc_to_link, "quick link")

    async def delete_quick_link(self, link_id: str) -> None:
        """
        Delete a quick link.

        Raises:
            ValueError: If the link does not exist
        """
        result = await self.quick_links.delete_one({"_id": link_id})

        if result.deleted_count == 0:
            raise ValueError("Quick link not found")

        await self.notifier.deleted(QUICK_LINKS, link_id)
