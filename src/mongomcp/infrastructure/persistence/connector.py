"""MongoDB connection management.

``StoreConnector`` owns the process-wide MongoDB client. Connection is
established lazily on the first tool call and reused afterwards.
"""

import asyncio
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.errors import ConfigurationError, PyMongoError

from mongomcp.core.config import MongoSettings
from mongomcp.core.exceptions import StoreConnectionError
from mongomcp.core.logging import get_logger
from mongomcp.infrastructure.persistence.document_store import DocumentStore

logger = get_logger(__name__)


class StoreConnector:
    """Database connection manager holding at most one live client.

    Concurrent callers of ``ensure_connected`` are serialized by a lock, so a
    second client is never opened while one is connected or connecting.
    """

    def __init__(self, settings: MongoSettings) -> None:
        """Initialize the connector.

        Args:
            settings: Connection URI, client options and fallback database name.
        """
        self.settings = settings
        self._client: AsyncMongoClient | None = None
        self._store: DocumentStore | None = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._store is not None

    @property
    def store(self) -> DocumentStore:
        """The store bound to the connected database.

        Raises:
            StoreConnectionError: If ``ensure_connected`` has not succeeded.
        """
        if self._store is None:
            raise StoreConnectionError("Not connected to MongoDB")
        return self._store

    async def ensure_connected(self) -> None:
        """Open the connection if it is not already open.

        Raises:
            StoreConnectionError: If the URI or options are invalid or the
                server cannot be reached.
        """
        if self._store is not None:
            return

        async with self._lock:
            if self._store is not None:
                return
            self._store = await self._connect()

    async def _connect(self) -> DocumentStore:
        client: AsyncMongoClient | None = None
        try:
            client = AsyncMongoClient(self.settings.uri, **self.settings.options)
            await client.admin.command("ping")
            database = client.get_default_database(default=self.settings.database)
        except (ConfigurationError, PyMongoError, TypeError, ValueError) as exc:
            if client is not None:
                await client.close()
            logger.error("Failed to connect to MongoDB", error=str(exc))
            raise StoreConnectionError(f"Failed to connect to MongoDB: {exc}") from exc

        self._client = client
        logger.info("Connected to MongoDB", database=database.name)
        return DocumentStore(database)

    async def check_connection(self) -> bool:
        """Ping the server. Returns False instead of raising."""
        try:
            await self.ensure_connected()
            client = self._client
            if client is None:
                # Disconnected concurrently
                logger.warning("MongoDB health check failed", error="client closed")
                return False
            await client.admin.command("ping")
        except (StoreConnectionError, PyMongoError) as exc:
            logger.warning("MongoDB health check failed", error=str(exc))
            return False
        return True

    async def disconnect(self) -> None:
        """Close the client. Safe to call when not connected."""
        async with self._lock:
            client, self._client, self._store = self._client, None, None
        if client is not None:
            await client.close()
            logger.info("MongoDB connection closed")

    def describe(self) -> dict[str, Any]:
        """Connection summary for health endpoints."""
        return {
            "connected": self.is_connected,
            "database": self._store.name if self._store is not None else None,
        }
