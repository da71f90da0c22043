"""Pytest configuration for all tests."""

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog
from bson import ObjectId

from mongomcp.application.dispatcher import OperationDispatcher
from mongomcp.application.handlers.base import HandlerContext
from mongomcp.core.config import MongoSettings, Settings, get_settings
from mongomcp.core.exceptions import NotFoundError
from mongomcp.domain.services.schema_registry import SchemaRegistry
from mongomcp.infrastructure.persistence.document_store import DEFAULT_SORT, parse_object_id


def _matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    for key, condition in query.items():
        value = document.get(key)
        if isinstance(condition, Mapping) and "$in" in condition:
            candidates = value if isinstance(value, list) else [value]
            if not any(c in condition["$in"] for c in candidates):
                return False
        elif value != condition:
            return False
    return True


class FakeDocumentStore:
    """In-memory stand-in for ``DocumentStore``.

    Supports equality and ``$in`` filters, which is all the handlers issue.
    Every method call is recorded in ``calls``.
    """

    def __init__(self, name: str = "test") -> None:
        self.name = name
        self.collections: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[str] = []
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _now(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def _prepare(self, document: Mapping[str, Any]) -> dict[str, Any]:
        prepared = dict(document)
        prepared.setdefault("_id", ObjectId())
        now = self._now()
        prepared["createdAt"] = now
        prepared["updatedAt"] = now
        return prepared

    async def insert_one(self, collection: str, document: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append("insert_one")
        prepared = self._prepare(document)
        self.collections.setdefault(collection, []).append(prepared)
        return prepared

    async def insert_many(
        self, collection: str, documents: Sequence[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        self.calls.append("insert_many")
        prepared = [self._prepare(document) for document in documents]
        self.collections.setdefault(collection, []).extend(prepared)
        return prepared

    async def find(
        self,
        collection: str,
        filter: Mapping[str, Any] | None = None,
        sort: Mapping[str, Any] | None = None,
        limit: int = 10,
    ) -> list[dict[str, Any]]:
        self.calls.append("find")
        documents = [d for d in self.collections.get(collection, []) if _matches(d, filter or {})]
        for key, direction in reversed(list((DEFAULT_SORT if sort is None else sort).items())):
            documents.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return documents[:limit] if limit else documents

    async def find_one_and_delete_by_id(self, collection: str, document_id: Any) -> dict[str, Any]:
        self.calls.append("find_one_and_delete_by_id")
        oid = parse_object_id(document_id)
        for document in self.collections.get(collection, []):
            if oid is not None and document["_id"] == oid:
                self.collections[collection].remove(document)
                return document
        raise NotFoundError(f"Document with ID '{document_id}' not found in '{collection}'")

    async def count(self, collection: str, filter: Mapping[str, Any] | None = None) -> int:
        self.calls.append("count")
        return len([d for d in self.collections.get(collection, []) if _matches(d, filter or {})])

    async def group_count(
        self, collection: str, field: str, unwind: bool = False, limit: int | None = None
    ) -> list[tuple[Any, int]]:
        self.calls.append("group_count")
        counts: dict[Any, int] = {}
        for document in self.collections.get(collection, []):
            values = document.get(field)
            for value in (values if unwind else [values]):
                counts[value] = counts.get(value, 0) + 1
        rows = sorted(counts.items(), key=lambda row: (-row[1], row[0]))
        return rows[:limit] if limit else rows

    async def list_collections(self) -> list[dict[str, str]]:
        self.calls.append("list_collections")
        return [{"name": name, "type": "collection"} for name in sorted(self.collections)]

    async def collection_exists(self, name: str) -> bool:
        self.calls.append("collection_exists")
        return name in self.collections

    async def create_collection(self, name: str) -> bool:
        self.calls.append("create_collection")
        if name in self.collections:
            return False
        self.collections[name] = []
        return True

    async def drop_collection(self, name: str) -> None:
        self.calls.append("drop_collection")
        if name not in self.collections:
            raise NotFoundError(f'Collection "{name}" does not exist')
        del self.collections[name]

    async def rename_collection(self, old_name: str, new_name: str) -> None:
        self.calls.append("rename_collection")
        if old_name not in self.collections:
            raise NotFoundError(f'Collection "{old_name}" does not exist')
        self.collections[new_name] = self.collections.pop(old_name)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test load settings afresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any logging configuration a test applied."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="testing",
        mongodb=MongoSettings(uri="mongodb://localhost:27017/mcp_test"),
    )


@pytest.fixture
def fake_store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def registry() -> SchemaRegistry:
    return SchemaRegistry()


@pytest.fixture
def handler_context(fake_store, registry) -> HandlerContext:
    return HandlerContext(store=fake_store, registry=registry, questions_collection="DsaQuestions")


@pytest.fixture
def mock_connector(fake_store) -> MagicMock:
    """Connector that is always connected to the fake store."""
    connector = MagicMock()
    connector.ensure_connected = AsyncMock()
    connector.disconnect = AsyncMock()
    connector.check_connection = AsyncMock(return_value=True)
    connector.store = fake_store
    return connector


@pytest.fixture
def dispatcher(mock_connector, registry) -> OperationDispatcher:
    return OperationDispatcher(connector=mock_connector, registry=registry)


@pytest.fixture
def valid_question() -> dict[str, Any]:
    return {
        "name": "Two Sum",
        "description": "Find two numbers that add up to a target.",
        "datastructure": ["array", "hash table"],
        "algorithm": ["hashing"],
        "constraints": "2 <= nums.length <= 10^4",
        "testcases": [{"input": "[2,7,11,15], 9", "output": "[0,1]"}],
        "level": "easy",
    }
