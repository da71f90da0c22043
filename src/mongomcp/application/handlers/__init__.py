"""Tool handlers: five fixed-schema question tools and six generic collection tools."""

from mongomcp.application.handlers.base import Handler, HandlerContext, Operation
from mongomcp.application.handlers.collection_handlers import COLLECTION_OPERATIONS
from mongomcp.application.handlers.question_handlers import QUESTION_OPERATIONS

ALL_OPERATIONS: list[Operation] = QUESTION_OPERATIONS + COLLECTION_OPERATIONS

__all__ = [
    "ALL_OPERATIONS",
    "COLLECTION_OPERATIONS",
    "Handler",
    "HandlerContext",
    "Operation",
    "QUESTION_OPERATIONS",
]
