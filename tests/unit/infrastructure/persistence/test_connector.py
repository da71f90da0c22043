"""Unit tests for StoreConnector."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo.errors import ConfigurationError, ServerSelectionTimeoutError

from mongomcp.core.config import MongoSettings
from mongomcp.core.exceptions import StoreConnectionError
from mongomcp.infrastructure.persistence.connector import StoreConnector


def _mock_client(database_name: str = "mcp_test") -> MagicMock:
    client = MagicMock()

    async def ping(*args, **kwargs):
        await asyncio.sleep(0)
        return {"ok": 1}

    client.admin.command = AsyncMock(side_effect=ping)
    client.close = AsyncMock()
    database = MagicMock()
    database.name = database_name
    client.get_default_database.return_value = database
    return client


@pytest.fixture
def mongo_settings():
    return MongoSettings(uri="mongodb://localhost:27017/mcp_test", options={"appname": "tests"})


@pytest.mark.asyncio
class TestStoreConnector:
    """Test connection lifecycle."""

    async def test_store_before_connect_raises(self, mongo_settings):
        connector = StoreConnector(mongo_settings)

        assert connector.is_connected is False
        with pytest.raises(StoreConnectionError):
            connector.store

    async def test_ensure_connected(self, mongo_settings):
        client = _mock_client()
        with patch(
            "mongomcp.infrastructure.persistence.connector.AsyncMongoClient", return_value=client
        ) as client_cls:
            connector = StoreConnector(mongo_settings)
            await connector.ensure_connected()

        client_cls.assert_called_once_with("mongodb://localhost:27017/mcp_test", appname="tests")
        client.get_default_database.assert_called_once_with(default="test")
        assert connector.is_connected is True
        assert connector.store.name == "mcp_test"
        assert connector.describe() == {"connected": True, "database": "mcp_test"}

    async def test_concurrent_callers_share_one_client(self, mongo_settings):
        with patch(
            "mongomcp.infrastructure.persistence.connector.AsyncMongoClient",
            side_effect=lambda *a, **kw: _mock_client(),
        ) as client_cls:
            connector = StoreConnector(mongo_settings)
            await asyncio.gather(*(connector.ensure_connected() for _ in range(10)))

        assert client_cls.call_count == 1

    async def test_second_call_reuses_connection(self, mongo_settings):
        client = _mock_client()
        with patch(
            "mongomcp.infrastructure.persistence.connector.AsyncMongoClient", return_value=client
        ) as client_cls:
            connector = StoreConnector(mongo_settings)
            await connector.ensure_connected()
            await connector.ensure_connected()

        assert client_cls.call_count == 1

    async def test_unreachable_server(self, mongo_settings):
        client = _mock_client()
        client.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
        with patch("mongomcp.infrastructure.persistence.connector.AsyncMongoClient", return_value=client):
            connector = StoreConnector(mongo_settings)
            with pytest.raises(StoreConnectionError) as exc_info:
                await connector.ensure_connected()

        assert exc_info.value.code == "connection_error"
        assert "no servers" in exc_info.value.message
        client.close.assert_awaited_once()
        assert connector.is_connected is False

    async def test_invalid_options(self, mongo_settings):
        with patch(
            "mongomcp.infrastructure.persistence.connector.AsyncMongoClient",
            side_effect=ConfigurationError("Unknown option appname2"),
        ):
            connector = StoreConnector(mongo_settings)
            with pytest.raises(StoreConnectionError):
                await connector.ensure_connected()

    async def test_retry_after_failure(self, mongo_settings):
        failing = _mock_client()
        failing.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
        with patch(
            "mongomcp.infrastructure.persistence.connector.AsyncMongoClient",
            side_effect=[failing, _mock_client()],
        ):
            connector = StoreConnector(mongo_settings)
            with pytest.raises(StoreConnectionError):
                await connector.ensure_connected()
            await connector.ensure_connected()

        assert connector.is_connected is True

    async def test_check_connection(self, mongo_settings):
        with patch(
            "mongomcp.infrastructure.persistence.connector.AsyncMongoClient",
            side_effect=ConfigurationError("bad"),
        ):
            connector = StoreConnector(mongo_settings)
            assert await connector.check_connection() is False

    async def test_check_connection_healthy(self, mongo_settings):
        with patch("mongomcp.infrastructure.persistence.connector.AsyncMongoClient", return_value=_mock_client()):
            connector = StoreConnector(mongo_settings)
            assert await connector.check_connection() is True

    async def test_check_connection_after_concurrent_disconnect(self, mongo_settings):
        client = _mock_client()
        with patch("mongomcp.infrastructure.persistence.connector.AsyncMongoClient", return_value=client):
            connector = StoreConnector(mongo_settings)
            await connector.ensure_connected()
            connector.ensure_connected = AsyncMock(side_effect=connector.disconnect)

            assert await connector.check_connection() is False

        client.close.assert_awaited_once()

    async def test_disconnect(self, mongo_settings):
        client = _mock_client()
        with patch("mongomcp.infrastructure.persistence.connector.AsyncMongoClient", return_value=client):
            connector = StoreConnector(mongo_settings)
            await connector.ensure_connected()
            await connector.disconnect()
            await connector.disconnect()

        client.close.assert_awaited_once()
        assert connector.is_connected is False
