"""Pytest configuration and fixtures."""
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from triumph_board.database import COLLECTIONS
from triumph_board.events import ChangeNotifier


def _matches(doc: dict, query: dict | None) -> bool:
    for key, expected in (query or {}).items():
        if isinstance(expected, dict) and "$in" in expected:
            if doc.get(key) not in expected["$in"]:
                return False
        elif doc.get(key) != expected:
            return False
    return True


def _sort_docs(docs: list[dict], key_or_list, direction=None) -> list[dict]:
    keys = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction or 1)]
    for key, order in reversed(keys):
        docs = sorted(docs, key=lambda d: d.get(key), reverse=order < 0)
    return docs


class FakeCursor:
    """Enough of a Motor cursor for sort() and to_list()."""

    def __init__(self, docs: list[dict]):
        self.docs = docs

    def sort(self, key_or_list, direction=None):
        self.docs = _sort_docs(self.docs, key_or_list, direction)
        return self

    async def to_list(self, length=None):
        return [dict(doc) for doc in self.docs]


class FakeCollection:
    """
    List-backed stand-in for a Motor collection.

    Supports the equality / $in filters, $set updates and the $not toggle
    pipeline used by the services.
    """

    def __init__(self, docs: list[dict] | None = None):
        self.docs = docs if docs is not None else []
        self.sessions = []

    async def insert_one(self, doc, session=None):
        self.sessions.append(session)
        self.docs.append(dict(doc))
        return MagicMock(inserted_id=doc["_id"])

    async def find_one(self, query=None, projection=None, sort=None, session=None):
        self.sessions.append(session)
        docs = [d for d in self.docs if _matches(d, query)]
        if sort:
            docs = _sort_docs(docs, sort)
        return dict(docs[0]) if docs else None

    def find(self, query=None, projection=None, session=None):
        self.sessions.append(session)
        return FakeCursor([d for d in self.docs if _matches(d, query)])

    async def count_documents(self, query, session=None):
        return len([d for d in self.docs if _matches(d, query)])

    async def find_one_and_update(self, query, update, return_document=False, session=None):
        for doc in self.docs:
            if _matches(doc, query):
                stages = update if isinstance(update, list) else [update]
                for stage in stages:
                    for field, value in stage["$set"].items():
                        if isinstance(value, dict) and "$not" in value:
                            source, default = value["$not"][0]["$ifNull"]
                            value = not doc.get(source.lstrip("$"), default)
                        doc[field] = value
                return dict(doc)
        return None

    async def replace_one(self, query, replacement, upsert=False, session=None):
        self.sessions.append(session)
        for index, doc in enumerate(self.docs):
            if _matches(doc, query):
                self.docs[index] = dict(replacement)
                return MagicMock(matched_count=1, upserted_id=None)
        if upsert:
            self.docs.append(dict(replacement))
            return MagicMock(matched_count=0, upserted_id=replacement["_id"])
        return MagicMock(matched_count=0, upserted_id=None)

    async def delete_one(self, query, session=None):
        self.sessions.append(session)
        for doc in self.docs:
            if _matches(doc, query):
                self.docs.remove(doc)
                return MagicMock(deleted_count=1)
        return MagicMock(deleted_count=0)

    async def delete_many(self, query, session=None):
        self.sessions.append(session)
        doomed = [d for d in self.docs if _matches(d, query)]
        for doc in doomed:
            self.docs.remove(doc)
        return MagicMock(deleted_count=len(doomed))


@asynccontextmanager
async def no_transaction():
    yield None


def make_mock_db(collections: dict) -> MagicMock:
    """Mock database returning the given collection objects by name."""
    mock_db = MagicMock()
    mock_db.__getitem__.side_effect = lambda key: collections[key]
    mock_db.transaction = no_transaction
    return mock_db


def make_cursor(docs: list[dict]) -> MagicMock:
    """Mock cursor whose sort() chains and to_list() returns docs."""
    mock_cursor = MagicMock()
    mock_cursor.sort.return_value = mock_cursor
    mock_cursor.to_list = AsyncMock(return_value=docs)
    return mock_cursor


@pytest.fixture
def fake_collections() -> dict:
    """One empty FakeCollection per entity collection."""
    return {name: FakeCollection() for name in COLLECTIONS}


@pytest.fixture
def fake_db(fake_collections) -> MagicMock:
    """Database mock backed by FakeCollections, without transactions."""
    return make_mock_db(fake_collections)


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier()


@pytest.fixture
def recorded_events(notifier):
    """Collect every event emitted on any entity collection."""
    events = []
    for name in COLLECTIONS:
        notifier.subscribe(name, events.append)
    return events


@pytest.fixture
def mock_db_factory():
    return make_mock_db


@pytest.fixture
def cursor_factory():
    return make_cursor
