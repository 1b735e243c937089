"""MongoDB entity store using Motor (async driver)."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from triumph_board.config import Settings, settings as default_settings
from triumph_board.exceptions import StoreInitializationError, StoreNotConnectedError

logger = logging.getLogger(__name__)

QUICK_LINKS = "quick_links"
GOALS = "goals"
TASKS = "tasks"
KNOWLEDGE_SNIPPETS = "knowledge_snippets"
WIDGET_CONFIGS = "widget_configs"

COLLECTIONS = (QUICK_LINKS, GOALS, TASKS, KNOWLEDGE_SNIPPETS, WIDGET_CONFIGS)


class Database:
    """
    Entity store connection manager.

    Constructed explicitly and handed to the PersistenceController; there is
    no process-wide instance.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.settings = config or default_settings
        self.client: AsyncIOMotorClient | None = None
        self.db: AsyncIOMotorDatabase | None = None

    @property
    def is_connected(self) -> bool:
        return self.db is not None

    async def connect(self) -> None:
        """
        Open the store, verify the server answers and create indexes.

        Raises:
            StoreInitializationError: If the store cannot be opened
        """
        try:
            self.client = AsyncIOMotorClient(
                self.settings.mongodb_url,
                serverSelectionTimeoutMS=self.settings.server_selection_timeout_ms,
                uuidRepresentation="standard",
            )
            await self.client.admin.command("ping")
            self.db = self.client[self.settings.mongodb_db_name]
            await self.ensure_indexes()
        except PyMongoError as e:
            logger.error(f"Failed to open entity store {self.settings.mongodb_db_name}: {e}")
            if self.client is not None:
                self.client.close()
            self.client = None
            self.db = None
            raise StoreInitializationError(str(e)) from e

        logger.info(f"Connected to MongoDB: {self.settings.mongodb_db_name}")

    async def disconnect(self) -> None:
        """Close the store."""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("Disconnected from MongoDB")

    async def ensure_indexes(self) -> None:
        """Create the indexes used by ordering and filtering queries."""
        for name in COLLECTIONS:
            await self.db[name].create_index([("display_order", ASCENDING)])
        await self.db[TASKS].create_index([("goal_id", ASCENDING), ("display_order", ASCENDING)])
        # Not unique: one widget per type is checked by the add-widget flow.
        await self.db[WIDGET_CONFIGS].create_index([("type", ASCENDING)])

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        """Get a MongoDB collection."""
        if self.db is None:
            raise StoreNotConnectedError("Database not connected")
        return self.db[name]

    def __getitem__(self, name: str) -> AsyncIOMotorCollection:
        return self.get_collection(name)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Optional[AsyncIOMotorClientSession]]:
        """
        Group several writes into one all-or-nothing unit.

        Yields a session with an open transaction when transactions are
        enabled, otherwise None (writes then apply one by one).
        """
        if not self.settings.mongodb_transactions:
            yield None
            return

        if self.client is None:
            raise StoreNotConnectedError("Database not connected")

        async with await self.client.start_session() as session:
            async with session.start_transaction():
                yield session
