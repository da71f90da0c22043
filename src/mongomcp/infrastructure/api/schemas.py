"""Pydantic schemas for the JSON-RPC 2.0 endpoint."""

from typing import Any

from pydantic import BaseModel, Field

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603


class JsonRpcRequest(BaseModel):
    jsonrpc: str = Field(default="2.0", pattern=r"^2\.0$")
    id: int | str | None = None
    method: str
    params: dict[str, Any] | None = None


class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Any | None = None


class JsonRpcResponse(BaseModel):
    """Response envelope. Exactly one of ``result`` and ``error`` is set."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any | None = None
    error: JsonRpcError | None = None

    def to_content(self) -> dict[str, Any]:
        data = self.model_dump(exclude_none=True)
        data["id"] = self.id
        if "error" in data:
            data.pop("result", None)
        else:
            data.setdefault("result", {})
        return data
