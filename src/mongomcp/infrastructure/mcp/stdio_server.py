"""stdio transport: serves the tools over the Model Context Protocol.

The MCP SDK handles framing and the handshake; every ``tools/call`` request
is handed to the ``OperationDispatcher``.
"""

import asyncio
import contextlib
import signal
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from mongomcp.application.dispatcher import OperationDispatcher, ToolResponse
from mongomcp.core.config import Settings
from mongomcp.core.logging import get_logger
from mongomcp.infrastructure.mcp.tool_definitions import mcp_tools

logger = get_logger(__name__)


class ToolCallFailed(Exception):
    """Carries a failure envelope out of the MCP call handler."""

    def __init__(self, response: ToolResponse) -> None:
        self.response = response
        super().__init__(response.text)


def create_server(dispatcher: OperationDispatcher, settings: Settings) -> Server:
    """Build the MCP server and register the list/call handlers.

    Args:
        dispatcher: Dispatcher executing tool calls.
        settings: Provides the server name and version for the handshake.
    """
    server = Server(settings.server.name, version=settings.server.version)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return mcp_tools()

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        response = await dispatcher.dispatch(name, arguments or {})
        if response.is_error:
            # The SDK reports raised errors as an isError result with this text
            raise ToolCallFailed(response)
        return [types.TextContent(type="text", text=response.text)]

    return server


async def run_stdio_server(settings: Settings) -> None:
    """Serve on stdin/stdout until EOF, SIGINT or SIGTERM.

    The store connection is closed before returning.
    """
    dispatcher = OperationDispatcher.from_settings(settings)
    server = create_server(dispatcher, settings)

    main_task = asyncio.current_task()
    loop = asyncio.get_running_loop()
    if main_task is not None:
        # add_signal_handler is unavailable on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signal.SIGTERM, main_task.cancel)

    logger.info(
        "MCP server running on stdio",
        server_name=settings.server.name,
        version=settings.server.version,
    )
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await dispatcher.aclose()
        logger.info("MCP server stopped")
