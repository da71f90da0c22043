"""MCP over HTTP: a JSON-RPC 2.0 endpoint.

Supports ``initialize``, ``tools/list`` and ``tools/call`` with plain JSON
responses. Tool calls go through the same ``OperationDispatcher`` as the
stdio transport.

Usage:
- POST /mcp - Send a JSON-RPC request
- GET /mcp - Server info
"""

from typing import Any

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from mongomcp.application.dispatcher import OperationDispatcher
from mongomcp.core.config import Settings
from mongomcp.core.logging import get_logger
from mongomcp.infrastructure.api.schemas import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
)
from mongomcp.infrastructure.mcp.tool_definitions import TOOL_DEFINITIONS, tool_names

logger = get_logger(__name__)

router = APIRouter()

PROTOCOL_VERSION = "2024-11-05"


def _error(request_id: Any, code: int, message: str) -> JsonRpcResponse:
    return JsonRpcResponse(id=request_id, error=JsonRpcError(code=code, message=message))


async def handle_jsonrpc_request(
    rpc_request: JsonRpcRequest,
    dispatcher: OperationDispatcher,
    settings: Settings,
) -> JsonRpcResponse:
    """Handle a single JSON-RPC request."""
    params = rpc_request.params or {}

    if rpc_request.method == "initialize":
        result: Any = {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": settings.server.name, "version": settings.server.version},
        }
    elif rpc_request.method == "tools/list":
        result = {"tools": TOOL_DEFINITIONS}
    elif rpc_request.method == "tools/call":
        name = params.get("name")
        if not isinstance(name, str) or not name:
            return _error(rpc_request.id, INVALID_REQUEST, "tools/call requires a tool name")
        response = await dispatcher.dispatch(name, params.get("arguments") or {})
        result = response.to_dict()
    elif rpc_request.method == "ping":
        result = {}
    else:
        return _error(rpc_request.id, METHOD_NOT_FOUND, f"Method not found: {rpc_request.method}")

    return JsonRpcResponse(id=rpc_request.id, result=result)


@router.post("/mcp")
async def mcp_endpoint(request: Request) -> Response:
    """JSON-RPC 2.0 endpoint for MCP requests."""
    try:
        body = await request.json()
        rpc_request = JsonRpcRequest.model_validate(body)
    except (ValueError, ValidationError) as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error(None, PARSE_ERROR, f"Parse error: {exc}").to_content(),
        )

    # Notifications carry no id and get no response body
    if rpc_request.id is None and rpc_request.method.startswith("notifications/"):
        return Response(status_code=status.HTTP_202_ACCEPTED)

    dispatcher: OperationDispatcher = request.app.state.dispatcher
    settings: Settings = request.app.state.settings
    try:
        rpc_response = await handle_jsonrpc_request(rpc_request, dispatcher, settings)
    except Exception as exc:
        logger.exception("JSON-RPC request failed", method=rpc_request.method)
        rpc_response = _error(rpc_request.id, INTERNAL_ERROR, f"Internal error: {exc}")

    return JSONResponse(content=rpc_response.to_content())


@router.get("/mcp")
async def mcp_info(request: Request) -> dict[str, Any]:
    """Server info and available tools."""
    settings: Settings = request.app.state.settings
    return {
        "name": settings.server.name,
        "version": settings.server.version,
        "protocol": "MCP JSON-RPC over HTTP",
        "tools": tool_names(),
        "endpoint": "/mcp",
    }
