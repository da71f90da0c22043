"""Error taxonomy for MongoMCP.

Every failure that reaches a caller is one of these types. The dispatcher
turns them into a uniform failure envelope using ``code`` and ``message``.
"""

from dataclasses import dataclass


@dataclass
class ErrorDetail:
    """A single field-level problem attached to an error."""

    field: str
    message: str
    code: str


class MongoMCPError(Exception):
    """Base class for all MongoMCP errors.

    Args:
        message: Human-readable error message.
        details: Optional field-level details.
    """

    code = "error"

    def __init__(self, message: str, details: list[ErrorDetail] | None = None) -> None:
        self.message = message
        self.details = details or []
        super().__init__(message)


class StoreConnectionError(MongoMCPError):
    """The document store is unreachable or misconfigured."""

    code = "connection_error"


class UnknownOperationError(MongoMCPError):
    """The dispatcher received an operation name it does not know."""

    code = "unknown_operation"

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Unknown tool: {operation}")


class InvalidDescriptorError(MongoMCPError):
    """A collection schema descriptor is malformed."""

    code = "invalid_descriptor"


class RecordValidationError(MongoMCPError):
    """A record or argument set is missing a required field or is malformed."""

    code = "validation_error"


class NotFoundError(MongoMCPError):
    """A delete or rename targeted a nonexistent record or collection."""

    code = "not_found"


class HandlerError(MongoMCPError):
    """Any other store or runtime failure, with the original message kept."""

    code = "handler_error"


def format_details(details: list[ErrorDetail]) -> str:
    """Render details as ``field: message`` pairs joined by semicolons."""
    return "; ".join(f"{d.field}: {d.message}" for d in details)
