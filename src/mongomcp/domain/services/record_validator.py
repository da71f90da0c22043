"""Record validation service for documents inserted into strict collections.

Ensures a document conforms to its collection binding: required fields are
present, values match their declared kind, and array elements match their
item kind. Date values given as ISO 8601 strings are converted to datetimes.
"""

from datetime import datetime
from typing import Any, Callable, Mapping

from mongomcp.core.exceptions import ErrorDetail, RecordValidationError, format_details
from mongomcp.domain.entities.descriptor import (
    CollectionBinding,
    FieldDescriptor,
    FieldKind,
    ItemKind,
)

# Fields the store layer maintains on every document
SYSTEM_FIELDS = frozenset({"_id", "createdAt", "updatedAt"})


def _type_error(field_name: str, expected: str, value: Any) -> ErrorDetail:
    return ErrorDetail(
        field=field_name,
        message=f"Expected {expected} value, got {type(value).__name__}",
        code="invalid_type",
    )


class RecordValidator:
    """Validator for documents against strict collection bindings.

    Each ``validate_*`` method returns ``(value, error)``: the value to store
    (possibly converted) and an error when the value is rejected.
    """

    @classmethod
    def validate_string(cls, value: Any, field_name: str) -> tuple[Any, ErrorDetail | None]:
        if not isinstance(value, str):
            return value, _type_error(field_name, "string", value)
        return value, None

    @classmethod
    def validate_number(cls, value: Any, field_name: str) -> tuple[Any, ErrorDetail | None]:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return value, _type_error(field_name, "number", value)
        return value, None

    @classmethod
    def validate_boolean(cls, value: Any, field_name: str) -> tuple[Any, ErrorDetail | None]:
        if not isinstance(value, bool):
            return value, _type_error(field_name, "boolean", value)
        return value, None

    @classmethod
    def validate_date(cls, value: Any, field_name: str) -> tuple[Any, ErrorDetail | None]:
        """Validate a date value.

        Accepts datetime objects or ISO 8601 strings, which are parsed.
        """
        if isinstance(value, datetime):
            return value, None

        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00")), None
            except ValueError:
                return value, ErrorDetail(
                    field=field_name,
                    message="Invalid date format. Use ISO 8601 format (e.g., 2024-01-01T12:00:00Z)",
                    code="invalid_date_format",
                )

        return value, _type_error(field_name, "date", value)

    @classmethod
    def validate_object(cls, value: Any, field_name: str) -> tuple[Any, ErrorDetail | None]:
        if not isinstance(value, Mapping):
            return value, _type_error(field_name, "object", value)
        return dict(value), None

    @classmethod
    def validate_array(
        cls, value: Any, field_name: str, item_kind: ItemKind
    ) -> tuple[Any, ErrorDetail | None]:
        """Validate an array and each of its elements against ``item_kind``."""
        if not isinstance(value, (list, tuple)):
            return value, _type_error(field_name, "array", value)

        if item_kind is ItemKind.MIXED:
            return list(value), None

        item_validators: dict[ItemKind, Callable[[Any, str], tuple[Any, ErrorDetail | None]]] = {
            ItemKind.STRING: cls.validate_string,
            ItemKind.NUMBER: cls.validate_number,
            ItemKind.BOOLEAN: cls.validate_boolean,
        }
        validator = item_validators[item_kind]
        items = []
        for index, item in enumerate(value):
            item, error = validator(item, f"{field_name}[{index}]")
            if error:
                return value, error
            items.append(item)
        return items, None

    @classmethod
    def validate_field_value(
        cls, value: Any, descriptor: FieldDescriptor, field_name: str
    ) -> tuple[Any, ErrorDetail | None]:
        """Validate a single field value against its descriptor."""
        if descriptor.kind is FieldKind.ARRAY:
            return cls.validate_array(value, field_name, descriptor.effective_item_kind)

        validators = {
            FieldKind.STRING: cls.validate_string,
            FieldKind.NUMBER: cls.validate_number,
            FieldKind.BOOLEAN: cls.validate_boolean,
            FieldKind.DATE: cls.validate_date,
            FieldKind.OBJECT: cls.validate_object,
        }
        return validators[descriptor.kind](value, field_name)

    @classmethod
    def check(
        cls, binding: CollectionBinding, data: Mapping[str, Any]
    ) -> tuple[dict[str, Any], list[ErrorDetail]]:
        """Validate document data against a binding.

        Non-strict bindings accept any data unchanged.

        Args:
            binding: The collection binding.
            data: The document to validate.

        Returns:
            Tuple of (processed_data, errors).
        """
        if not binding.strict:
            return dict(data), []

        errors: list[ErrorDetail] = []
        processed: dict[str, Any] = {}

        for field_name in data:
            if field_name not in binding.descriptors and field_name not in SYSTEM_FIELDS:
                errors.append(
                    ErrorDetail(
                        field=field_name,
                        message=f"Unknown field '{field_name}' not defined in collection schema",
                        code="unknown_field",
                    )
                )

        for field_name, descriptor in binding.descriptors.items():
            value = data.get(field_name)
            missing = value is None or (descriptor.kind is FieldKind.STRING and value == "")

            if missing:
                if descriptor.required:
                    errors.append(
                        ErrorDetail(
                            field=field_name,
                            message=f"Required field '{field_name}' is missing",
                            code="required_missing",
                        )
                    )
                elif field_name in data:
                    processed[field_name] = value
                continue

            converted, error = cls.validate_field_value(value, descriptor, field_name)
            if error:
                errors.append(error)
            else:
                processed[field_name] = converted

        return processed, errors

    @classmethod
    def validate(cls, binding: CollectionBinding, data: Mapping[str, Any]) -> dict[str, Any]:
        """Validate document data, raising on the first failing document.

        Raises:
            RecordValidationError: If any field is missing or malformed.
        """
        processed, errors = cls.check(binding, data)
        if errors:
            raise RecordValidationError(
                f"Document failed validation for '{binding.collection_name}': {format_details(errors)}",
                details=errors,
            )
        return processed
