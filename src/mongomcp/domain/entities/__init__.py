"""Domain entities for MongoMCP.

Entities represent core concepts and have no dependencies on the store driver
or the transport.
"""

from mongomcp.domain.entities.descriptor import (
    CollectionBinding,
    FieldDescriptor,
    FieldKind,
    ItemKind,
)
from mongomcp.domain.entities.question import Level, Question, TestCase

__all__ = [
    "CollectionBinding",
    "FieldDescriptor",
    "FieldKind",
    "ItemKind",
    "Level",
    "Question",
    "TestCase",
]
