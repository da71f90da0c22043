"""Shared handler types.

A handler is an async function ``(context, arguments) -> str`` that executes
one named tool end-to-end against the store and returns display text.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable

from pydantic import BaseModel, ValidationError

from mongomcp.core.exceptions import ErrorDetail
from mongomcp.domain.services.schema_registry import SchemaRegistry
from mongomcp.infrastructure.persistence.document_store import DocumentStore


@dataclass
class HandlerContext:
    """Per-call resources passed to every handler.

    Attributes:
        store: Store bound to the connected database.
        registry: The process-wide schema registry.
        questions_collection: Collection holding the fixed-schema questions.
    """

    store: DocumentStore
    registry: SchemaRegistry
    questions_collection: str = "DsaQuestions"


Handler = Callable[[HandlerContext, BaseModel], Awaitable[str]]


@dataclass(frozen=True)
class Operation:
    """A named tool: its argument model and handler."""

    name: str
    arguments: type[BaseModel]
    handler: Handler


def validation_details(exc: ValidationError, prefix: str = "") -> list[ErrorDetail]:
    """Convert a pydantic ValidationError into error details."""
    details = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"])
        if prefix:
            path = f"{prefix}.{path}" if path else prefix
        details.append(ErrorDetail(field=path or "arguments", message=error["msg"], code=error["type"]))
    return details
