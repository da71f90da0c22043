"""Document store adapter over a pymongo async database.

``DocumentStore`` is the only module that issues MongoDB commands. It adds
``createdAt``/``updatedAt`` timestamps on insert, keeps batch inserts
all-or-nothing, and translates driver errors that have a meaning in the
MongoMCP error taxonomy.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from bson import ObjectId, json_util
from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import (
    BulkWriteError,
    CollectionInvalid,
    ConnectionFailure,
    OperationFailure,
    PyMongoError,
)

from mongomcp.core.exceptions import HandlerError, NotFoundError, StoreConnectionError
from mongomcp.core.logging import get_logger

logger = get_logger(__name__)

# Server error codes
NAMESPACE_NOT_FOUND = 26
NAMESPACE_EXISTS = 48

DEFAULT_SORT: dict[str, int] = {"createdAt": -1}


def to_json(value: Any) -> str:
    """Render documents as indented relaxed Extended JSON."""
    return json_util.dumps(value, json_options=json_util.RELAXED_JSON_OPTIONS, indent=2)


def parse_object_id(value: Any) -> ObjectId | None:
    """Return ``value`` as an ObjectId, or None if it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def cast_id_filter(filter: Mapping[str, Any]) -> dict[str, Any]:
    """Cast a string ``_id`` in a filter to ObjectId when it is a valid id."""
    query = dict(filter)
    if "_id" in query:
        oid = parse_object_id(query["_id"])
        if oid is not None:
            query["_id"] = oid
    return query


def sort_spec(sort: Mapping[str, Any] | None) -> list[tuple[str, int]]:
    """Convert a ``{"field": 1 | -1}`` mapping into a pymongo sort list."""
    if not sort:
        return []
    return [(key, DESCENDING if int(direction) < 0 else ASCENDING) for key, direction in sort.items()]


class DocumentStore:
    """Store operations used by the tool handlers.

    Args:
        database: A connected pymongo ``AsyncDatabase``.
    """

    def __init__(self, database: AsyncDatabase) -> None:
        self.database = database

    @property
    def name(self) -> str:
        return self.database.name

    def _prepare(self, document: Mapping[str, Any], now: datetime) -> dict[str, Any]:
        prepared = dict(document)
        prepared.setdefault("_id", ObjectId())
        prepared["createdAt"] = now
        prepared["updatedAt"] = now
        return prepared

    async def insert_one(self, collection: str, document: Mapping[str, Any]) -> dict[str, Any]:
        """Insert one document and return it as stored (with ``_id`` and timestamps)."""
        prepared = self._prepare(document, datetime.now(timezone.utc))
        try:
            await self.database[collection].insert_one(prepared)
        except ConnectionFailure as exc:
            raise StoreConnectionError(f"Lost connection to MongoDB: {exc}") from exc
        return prepared

    async def insert_many(
        self, collection: str, documents: Sequence[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        """Insert a batch with all-or-nothing semantics.

        The batch is written in order. If the server rejects a document part
        way, or the connection drops mid-batch, the documents this call may
        have written are deleted again and the failure is raised.

        Returns:
            The stored documents, in input order.
        """
        now = datetime.now(timezone.utc)
        prepared = [self._prepare(document, now) for document in documents]
        if not prepared:
            return []

        coll = self.database[collection]
        try:
            await coll.insert_many(prepared, ordered=True)
        except BulkWriteError as exc:
            inserted = exc.details.get("nInserted", 0)
            await self._discard(collection, prepared[:inserted])
            errors = exc.details.get("writeErrors") or [{}]
            first = errors[0]
            raise HandlerError(
                f"Batch insert failed at index {first.get('index', inserted)}: "
                f"{first.get('errmsg', str(exc))}. No documents were inserted."
            ) from exc
        except PyMongoError as exc:
            # Earlier sub-batches may have been committed before the failure
            await self._discard(collection, prepared)
            if isinstance(exc, ConnectionFailure):
                raise StoreConnectionError(f"Lost connection to MongoDB: {exc}") from exc
            raise HandlerError(f"Batch insert failed: {exc}. No documents were inserted.") from exc
        return prepared

    async def _discard(self, collection: str, documents: Sequence[Mapping[str, Any]]) -> None:
        """Best-effort delete of documents written by a failed batch."""
        ids = [doc["_id"] for doc in documents]
        if ids:
            try:
                await self.database[collection].delete_many({"_id": {"$in": ids}})
            except PyMongoError as exc:
                logger.error(
                    "Batch rollback failed", collection=collection, batch_size=len(ids), error=str(exc)
                )
                return
        logger.warning("Batch insert rolled back", collection=collection, rolled_back=len(ids))

    async def find(
        self,
        collection: str,
        filter: Mapping[str, Any] | None = None,
        sort: Mapping[str, Any] | None = None,
        limit: int = 10,
    ) -> list[dict[str, Any]]:
        """Find documents with filter, sort and limit. ``limit`` 0 means no limit."""
        cursor = self.database[collection].find(cast_id_filter(filter or {}))
        spec = sort_spec(DEFAULT_SORT if sort is None else sort)
        if spec:
            cursor = cursor.sort(spec)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=None)

    async def find_one_and_delete_by_id(self, collection: str, document_id: Any) -> dict[str, Any]:
        """Delete a document by id and return it.

        Raises:
            NotFoundError: If the id is not a valid ObjectId or no document has it.
        """
        oid = parse_object_id(document_id)
        if oid is None:
            raise NotFoundError(f"Document with ID '{document_id}' not found in '{collection}'")

        deleted = await self.database[collection].find_one_and_delete({"_id": oid})
        if deleted is None:
            raise NotFoundError(f"Document with ID '{document_id}' not found in '{collection}'")
        return deleted

    async def count(self, collection: str, filter: Mapping[str, Any] | None = None) -> int:
        return await self.database[collection].count_documents(dict(filter or {}))

    async def group_count(
        self,
        collection: str,
        field: str,
        unwind: bool = False,
        limit: int | None = None,
    ) -> list[tuple[Any, int]]:
        """Count documents per distinct value of ``field``.

        With ``unwind``, array fields are flattened first so each element is
        counted once per document containing it. Results are ordered by count
        descending, then by value ascending.
        """
        pipeline: list[dict[str, Any]] = []
        if unwind:
            pipeline.append({"$unwind": f"${field}"})
        pipeline.append({"$group": {"_id": f"${field}", "count": {"$sum": 1}}})
        pipeline.append({"$sort": {"count": -1, "_id": 1}})
        if limit:
            pipeline.append({"$limit": limit})

        cursor = await self.database[collection].aggregate(pipeline)
        rows = await cursor.to_list(length=None)
        return [(row["_id"], row["count"]) for row in rows]

    async def list_collections(self) -> list[dict[str, str]]:
        """Name and type of every collection in the database, sorted by name."""
        cursor = await self.database.list_collections()
        infos = await cursor.to_list(length=None)
        collections = [
            {"name": info["name"], "type": info.get("type", "collection")} for info in infos
        ]
        return sorted(collections, key=lambda c: c["name"])

    async def collection_exists(self, name: str) -> bool:
        names = await self.database.list_collection_names(filter={"name": name})
        return name in names

    async def create_collection(self, name: str) -> bool:
        """Create an empty collection.

        Returns:
            True if created, False if it already existed.
        """
        try:
            await self.database.create_collection(name)
        except CollectionInvalid:
            return False
        except OperationFailure as exc:
            if exc.code == NAMESPACE_EXISTS:
                return False
            raise
        return True

    async def drop_collection(self, name: str) -> None:
        """Drop a collection and all its documents.

        Raises:
            NotFoundError: If the collection does not exist.
        """
        if not await self.collection_exists(name):
            raise NotFoundError(f'Collection "{name}" does not exist')
        try:
            await self.database.drop_collection(name)
        except OperationFailure as exc:
            if exc.code == NAMESPACE_NOT_FOUND:
                raise NotFoundError(f'Collection "{name}" does not exist') from exc
            raise

    async def rename_collection(self, old_name: str, new_name: str) -> None:
        """Rename a collection.

        Raises:
            NotFoundError: If the source collection does not exist.
        """
        try:
            await self.database[old_name].rename(new_name)
        except OperationFailure as exc:
            if exc.code == NAMESPACE_NOT_FOUND or "source namespace does not exist" in str(exc):
                raise NotFoundError(f'Collection "{old_name}" does not exist') from exc
            raise
