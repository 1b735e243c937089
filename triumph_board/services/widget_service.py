"""Widget configuration service - storage logic for dashboard panels."""
from typing import Optional

from pymongo import ASCENDING

from triumph_board.database import WIDGET_CONFIGS
from triumph_board.events import ChangeNotifier
from triumph_board.models.widget_config import WidgetConfig, WidgetConfigCreate, WidgetType
from triumph_board.services.documents import convert_documents
from triumph_board.services.ordering import next_display_order
from triumph_board.utils.ids import new_entity_id


class WidgetConfigService:
    """Service for handling widget configuration operations."""

    def __init__(self, db, notifier: Optional[ChangeNotifier] = None):
        """Initialize service with database connection."""
        self.db = db
        self.widget_configs = db[WIDGET_CONFIGS]
        self.notifier = notifier or ChangeNotifier()

    def _doc_to_widget(self, doc: dict) -> WidgetConfig:
        """Convert database document to WidgetConfig model."""
        return WidgetConfig(
            _id=str(doc["_id"]),
            type=doc["type"],
            payload=doc.get("payload"),
            display_order=doc.get("display_order", 0),
        )

    async def create_widget_config(self, widget_create: WidgetConfigCreate) -> WidgetConfig:
        """
        Create a widget configuration at the end of the dashboard.

        Does not check whether a widget of the same type already exists;
        the add-widget flow does that before calling.

        Args:
            widget_create: Widget creation data

        Returns:
            Created widget configuration
        """
        widget_doc = {
            "_id": new_entity_id(),
            "type": widget_create.type.value,
            "payload": widget_create.payload,
            "display_order": await next_display_order(self.widget_configs),
        }

        await self.widget_configs.insert_one(widget_doc)
        await self.notifier.created(WIDGET_CONFIGS, widget_doc["_id"])

        return self._doc_to_widget(widget_doc)

    async def list_widget_configs(
        self,
        widget_type: Optional[WidgetType] = None,
    ) -> list[WidgetConfig]:
        """
        List widget configurations in display order.

        Args:
            widget_type: Optional type filter; all widgets when omitted

        Returns:
            List of widget configurations
        """
        query = {}
        if widget_type is not None:
            query["type"] = WidgetType(widget_type).value

        cursor = self.widget_configs.find(query).sort("display_order", ASCENDING)
        widget_docs = await cursor.to_list(length=None)

        return convert_documents(widget_docs, self._doc_to_widget, "widget config")

    async def delete_widget_config(self, widget_id: str) -> None:
        """
        Remove a widget from the dashboard.

        Raises:
            ValueError: If widget not found
        """
        result = await self.widget_configs.delete_one({"_id": widget_id})

        if result.deleted_count == 0:
            raise ValueError("Widget not found")

        await self.notifier.deleted(WIDGET_CONFIGS, widget_id)
