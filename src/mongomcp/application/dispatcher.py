"""Operation dispatcher - the single entry point for tool calls.

Each call moves through ``RECEIVED -> CONNECTING -> RESOLVING -> EXECUTING``
and ends ``SUCCEEDED`` or ``FAILED``. Whatever happens inside, the caller
receives exactly one ``ToolResponse``; no exception escapes ``dispatch``.
Nothing is retried.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from mongomcp.application.handlers import ALL_OPERATIONS, HandlerContext, Operation
from mongomcp.application.handlers.base import validation_details
from mongomcp.core.config import Settings
from mongomcp.core.exceptions import (
    HandlerError,
    MongoMCPError,
    RecordValidationError,
    UnknownOperationError,
    format_details,
)
from mongomcp.core.logging import LoggingContext, get_logger
from mongomcp.domain.services.schema_registry import SchemaRegistry
from mongomcp.infrastructure.persistence.connector import StoreConnector

logger = get_logger(__name__)


class CallState(str, Enum):
    """Lifecycle of a single tool call."""

    RECEIVED = "received"
    CONNECTING = "connecting"
    RESOLVING = "resolving"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ToolResponse:
    """Uniform result of a tool call.

    Attributes:
        text: Display text; the error message on failure.
        is_error: Whether the call failed.
        error_code: Taxonomy code on failure, None on success.
    """

    text: str
    is_error: bool = False
    error_code: str | None = None

    @classmethod
    def success(cls, text: str) -> "ToolResponse":
        return cls(text=text)

    @classmethod
    def failure(cls, error: MongoMCPError) -> "ToolResponse":
        return cls(text=error.message, is_error=True, error_code=error.code)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }
        if self.error_code:
            data["errorCode"] = self.error_code
        return data


class OperationDispatcher:
    """Routes tool calls to handlers.

    The dispatcher owns the store connector and the schema registry for the
    lifetime of the server; both survive across calls and are torn down
    together by ``aclose``.
    """

    def __init__(
        self,
        connector: StoreConnector,
        registry: SchemaRegistry | None = None,
        questions_collection: str = "DsaQuestions",
        operations: Iterable[Operation] | None = None,
    ) -> None:
        self.connector = connector
        self.registry = registry if registry is not None else SchemaRegistry()
        self.questions_collection = questions_collection
        self._operations: dict[str, Operation] = {
            op.name: op for op in (operations if operations is not None else ALL_OPERATIONS)
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "OperationDispatcher":
        return cls(
            connector=StoreConnector(settings.mongodb),
            registry=SchemaRegistry(),
            questions_collection=settings.questions_collection,
        )

    def operation_names(self) -> list[str]:
        return list(self._operations)

    async def dispatch(self, name: str, arguments: Mapping[str, Any] | None = None) -> ToolResponse:
        """Execute one tool call.

        Args:
            name: Tool name.
            arguments: Tool arguments as a key-value mapping.

        Returns:
            The handler's text on success, or the failure envelope.
        """
        call_id = f"op_{uuid.uuid4().hex[:12]}"
        with LoggingContext(operation=str(name), call_id=call_id):
            try:
                text = await self._execute(name, arguments)
            except MongoMCPError as exc:
                self._transition(CallState.FAILED, code=exc.code)
                logger.warning("Tool call failed", code=exc.code, error=exc.message)
                return ToolResponse.failure(exc)
            except Exception as exc:
                self._transition(CallState.FAILED, code=HandlerError.code)
                logger.exception("Unexpected error in tool call")
                return ToolResponse.failure(HandlerError(f"Tool execution failed: {exc}"))

            self._transition(CallState.SUCCEEDED)
            return ToolResponse.success(text)

    async def _execute(self, name: str, arguments: Mapping[str, Any] | None) -> str:
        self._transition(CallState.RECEIVED)

        self._transition(CallState.CONNECTING)
        await self.connector.ensure_connected()

        self._transition(CallState.RESOLVING)
        operation = self._operations.get(name)
        if operation is None:
            raise UnknownOperationError(name)

        self._transition(CallState.EXECUTING)
        args = self._parse_arguments(operation, arguments)
        context = HandlerContext(
            store=self.connector.store,
            registry=self.registry,
            questions_collection=self.questions_collection,
        )
        return await operation.handler(context, args)

    @staticmethod
    def _parse_arguments(operation: Operation, arguments: Mapping[str, Any] | None) -> Any:
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            raise RecordValidationError(
                f"Invalid arguments for {operation.name}: expected an object"
            )
        try:
            return operation.arguments.model_validate(dict(arguments))
        except ValidationError as exc:
            details = validation_details(exc)
            raise RecordValidationError(
                f"Invalid arguments for {operation.name}: {format_details(details)}",
                details=details,
            ) from exc

    @staticmethod
    def _transition(state: CallState, **fields: Any) -> None:
        logger.debug("Call state", state=state.value, **fields)

    async def aclose(self) -> None:
        """Close the store connection and drop all schema bindings."""
        await self.connector.disconnect()
        self.registry.clear()
