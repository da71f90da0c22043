"""Domain services for MongoMCP.

Services contain logic that doesn't naturally fit within a single entity.
They have no dependencies on the store driver or the transport.
"""

from mongomcp.domain.services.descriptor_validator import (
    RESERVED_FIELD_NAMES,
    DescriptorValidator,
)
from mongomcp.domain.services.record_validator import RecordValidator
from mongomcp.domain.services.schema_registry import SchemaRegistry

__all__ = [
    "DescriptorValidator",
    "RESERVED_FIELD_NAMES",
    "RecordValidator",
    "SchemaRegistry",
]
