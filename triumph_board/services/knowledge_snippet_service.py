"""Knowledge snippet service - storage logic for code snippets and notes."""
from datetime import datetime
from typing import Optional

from pymongo import DESCENDING

from triumph_board.database import KNOWLEDGE_SNIPPETS
from triumph_board.events import ChangeNotifier
from triumph_board.models.common import INT64_MAX
from triumph_board.models.knowledge_snippet import (
    KnowledgeSnippet,
    KnowledgeSnippetCreate,
    KnowledgeSnippetUpdate,
    split_tags,
)
from triumph_board.services.documents import convert_documents
from triumph_board.services.ordering import next_display_order
from triumph_board.utils.ids import new_entity_id


class KnowledgeSnippetService:
    """Service for handling knowledge snippet operations."""

    def __init__(self, db, notifier: Optional[ChangeNotifier] = None):
        """Initialize service with database connection."""
        self.db = db
        self.snippets = db[KNOWLEDGE_SNIPPETS]
        self.notifier = notifier or ChangeNotifier()

    def _doc_to_snippet(self, doc: dict) -> KnowledgeSnippet:
        """Convert database document to KnowledgeSnippet model."""
        return KnowledgeSnippet(
            _id=str(doc["_id"]),
            title=doc.get("title"),
            content=doc["content"],
            language_or_type=doc.get("language_or_type"),
            tags=doc.get("tags"),
            date_created=doc["date_created"],
            last_accessed=doc.get("last_accessed"),
            is_favorite=doc.get("is_favorite", False),
            display_order=doc.get("display_order", 0),
        )

    async def create_snippet(self, snippet_create: KnowledgeSnippetCreate) -> KnowledgeSnippet:
        """
        Create a new knowledge snippet.

        Content is validated by KnowledgeSnippetCreate, so an empty snippet
        never reaches the store.

        Args:
            snippet_create: Snippet creation data

        Returns:
            Created snippet
        """
        snippet_doc = {
            "_id": new_entity_id(),
            "title": snippet_create.title,
            "content": snippet_create.content,
            "language_or_type": snippet_create.language_or_type,
            "tags": snippet_create.tags,
            "date_created": datetime.utcnow(),
            "last_accessed": None,
            "is_favorite": snippet_create.is_favorite,
            "display_order": await next_display_order(self.snippets, maximum=INT64_MAX),
        }

        await self.snippets.insert_one(snippet_doc)
        await self.notifier.created(KNOWLEDGE_SNIPPETS, snippet_doc["_id"])

        return self._doc_to_snippet(snippet_doc)

    async def list_snippets(
        self,
        favorites_only: bool = False,
        tag: Optional[str] = None,
    ) -> list[KnowledgeSnippet]:
        """
        List snippets, newest first.

        Args:
            favorites_only: Only return favourite snippets
            tag: Optional tag filter (exact match, case-insensitive)

        Returns:
            List of snippets
        """
        query = {}
        if favorites_only:
            query["is_favorite"] = True

        cursor = self.snippets.find(query).sort("date_created", DESCENDING)
        snippet_docs = await cursor.to_list(length=None)
        snippets = convert_documents(snippet_docs, self._doc_to_snippet, "knowledge snippet")

        if tag:
            wanted = tag.strip().lower()
            snippets = [s for s in snippets if wanted in (t.lower() for t in split_tags(s.tags))]

        return snippets

    async def update_snippet(
        self,
        snippet_id: str,
        snippet_update: KnowledgeSnippetUpdate,
    ) -> KnowledgeSnippet:
        """
        Save edits to a snippet and stamp its last access time.

        Args:
            snippet_id: Snippet ID
            snippet_update: Fields to change; blank optional text clears them

        Returns:
            Updated snippet

        Raises:
            ValueError: If snippet not found
        """
        update_doc = {"last_accessed": datetime.utcnow()}

        if snippet_update.content is not None:
            update_doc["content"] = snippet_update.content
        if snippet_update.title is not None:
            update_doc["title"] = snippet_update.title.strip() or None
        if snippet_update.language_or_type is not None:
            update_doc["language_or_type"] = snippet_update.language_or_type.strip() or None
        if snippet_update.tags is not None:
            update_doc["tags"] = snippet_update.tags.strip() or None
        if snippet_update.is_favorite is not None:
            update_doc["is_favorite"] = snippet_update.is_favorite

        updated_doc = await self.snippets.find_one_and_update(
            {"_id": snippet_id},
            {"$set": update_doc},
            return_document=True,
        )

        if not updated_doc:
            raise ValueError("Knowledge snippet not found")

        await self.notifier.updated(KNOWLEDGE_SNIPPETS, snippet_id)

        return self._doc_to_snippet(updated_doc)

    async def toggle_favorite(self, snippet_id: str) -> KnowledgeSnippet:
        """
        Flip a snippet's favourite flag in the store.

        Raises:
            ValueError: If snippet not found
        """
        updated_doc = await self.snippets.find_one_and_update(
            {"_id": snippet_id},
            [{"$set": {"is_favorite": {"$not": [{"$ifNull": ["$is_favorite", False]}]}}}],
            return_document=True,
        )

        if not updated_doc:
            raise ValueError("Knowledge snippet not found")

        await self.notifier.updated(KNOWLEDGE_SNIPPETS, snippet_id)

        return self._doc_to_snippet(updated_doc)

    async def touch_last_accessed(self, snippet_id: str) -> KnowledgeSnippet:
        """
        Record that a snippet was opened.

        Raises:
            ValueError: If snippet not found
        """
        updated_doc = await self.snippets.find_one_and_update(
            {"_id": snippet_id},
            {"$set": {"last_accessed": datetime.utcnow()}},
            return_document=True,
        )

        if not updated_doc:
            raise ValueError("Knowledge snippet not found")

        await self.notifier.updated(KNOWLEDGE_SNIPPETS, snippet_id)

        return self._doc_to_snippet(updated_doc)

    async def delete_snippet(self, snippet_id: str) -> None:
        """
        Delete a snippet.

        Raises:
            ValueError: If snippet not found
        """
        result = await self.snippets.delete_one({"_id": snippet_id})

        if result.deleted_count == 0:
            raise ValueError("Knowledge snippet not found")

        await self.notifier.deleted(KNOWLEDGE_SNIPPETS, snippet_id)

    async def delete_all_snippets(self) -> int:
        """
        Delete every snippet.

        Returns:
            Number of snippets deleted
        """
        async with self.db.transaction() as session:
            cursor = self.snippets.find({}, {"_id": 1}, session=session)
            snippet_ids = [str(doc["_id"]) for doc in await cursor.to_list(length=None)]
            await self.snippets.delete_many({"_id": {"$in": snippet_ids}}, session=session)

        for snippet_id in snippet_ids:
            await self.notifier.deleted(KNOWLEDGE_SNIPPETS, snippet_id)

        return len(snippet_ids)
