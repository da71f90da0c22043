"""Descriptor validation service for runtime collection schemas.

Validates collection names and descriptor sets, and compiles a valid
descriptor set into ``FieldDescriptor`` objects.
Supports field kinds: String, Number, Boolean, Date, Array, Object.
"""

from typing import Any, Mapping

from mongomcp.core.exceptions import ErrorDetail, InvalidDescriptorError, format_details
from mongomcp.domain.entities.descriptor import FieldDescriptor, FieldKind, ItemKind

# Field names maintained by the store layer
RESERVED_FIELD_NAMES = frozenset({"_id", "createdAt", "updatedAt"})

ITEM_KIND_KEYS = ("itemType", "itemKind")


def _lookup_enum(enum_cls: type, value: Any) -> Any:
    """Case-insensitive enum lookup by value. Returns None when unknown."""
    if not isinstance(value, str):
        return None
    for member in enum_cls:
        if member.value.lower() == value.strip().lower():
            return member
    return None


class DescriptorValidator:
    """Validator for collection creation requests.

    Validates collection names, descriptor sets, and individual field
    descriptors.
    """

    MAX_NAME_LENGTH = 120

    @classmethod
    def validate_name(cls, name: Any) -> list[ErrorDetail]:
        """Validate a collection name against MongoDB naming rules.

        Args:
            name: The collection name to validate.

        Returns:
            List of validation errors (empty if valid).
        """
        if not isinstance(name, str) or not name:
            return [ErrorDetail("collectionName", "Collection name is required", "name_required")]

        errors = []
        if len(name) > cls.MAX_NAME_LENGTH:
            errors.append(
                ErrorDetail(
                    "collectionName",
                    f"Collection name must be at most {cls.MAX_NAME_LENGTH} characters",
                    "name_too_long",
                )
            )
        if "$" in name or "\x00" in name:
            errors.append(
                ErrorDetail(
                    "collectionName",
                    "Collection name must not contain '$' or null characters",
                    "name_invalid_format",
                )
            )
        if name.startswith("system."):
            errors.append(
                ErrorDetail(
                    "collectionName",
                    "Collection names starting with 'system.' are reserved",
                    "name_reserved",
                )
            )
        return errors

    @classmethod
    def validate_field_name(cls, name: str) -> list[ErrorDetail]:
        """Validate a field name.

        Args:
            name: The field name to validate.

        Returns:
            List of validation errors (empty if valid).
        """
        path = f"schema.{name}"
        if not name:
            return [ErrorDetail("schema", "Field name is required", "field_name_required")]
        if name.startswith("$") or "." in name:
            return [
                ErrorDetail(
                    path,
                    "Field name must not start with '$' or contain '.'",
                    "field_name_invalid_format",
                )
            ]
        if name in RESERVED_FIELD_NAMES:
            return [
                ErrorDetail(
                    path,
                    f"Field name '{name}' is reserved and cannot be used",
                    "field_name_reserved",
                )
            ]
        return []

    @classmethod
    def validate_descriptor(cls, name: str, config: Any) -> list[ErrorDetail]:
        """Validate a single field descriptor.

        Args:
            name: Field name (for error paths).
            config: The descriptor in wire format, e.g.
                ``{"type": "Array", "itemType": "Number", "required": true}``.

        Returns:
            List of validation errors (empty if valid).
        """
        path = f"schema.{name}"
        if not isinstance(config, Mapping):
            return [ErrorDetail(path, "Field descriptor must be an object", "descriptor_invalid")]

        raw_kind = config.get("type")
        if raw_kind is None:
            return [ErrorDetail(f"{path}.type", "Field type is required", "field_type_required")]

        errors = []
        kind = _lookup_enum(FieldKind, raw_kind)
        if kind is None:
            valid = ", ".join(k.value for k in FieldKind)
            errors.append(
                ErrorDetail(
                    f"{path}.type",
                    f"Invalid field type '{raw_kind}'. Valid types: {valid}",
                    "field_type_invalid",
                )
            )

        required = config.get("required", False)
        if not isinstance(required, bool):
            errors.append(
                ErrorDetail(f"{path}.required", "'required' must be a boolean", "required_invalid")
            )

        for key in ITEM_KIND_KEYS:
            if config.get(key) is None:
                continue
            if kind is not None and kind is not FieldKind.ARRAY:
                errors.append(
                    ErrorDetail(
                        f"{path}.{key}",
                        f"'{key}' is only allowed when type is Array (got {kind.value})",
                        "item_type_not_allowed",
                    )
                )
            elif _lookup_enum(ItemKind, config[key]) is None:
                valid = ", ".join(k.value for k in ItemKind)
                errors.append(
                    ErrorDetail(
                        f"{path}.{key}",
                        f"Invalid item type '{config[key]}'. Valid types: {valid}",
                        "item_type_invalid",
                    )
                )

        return errors

    @classmethod
    def validate_schema(cls, schema: Any) -> list[ErrorDetail]:
        """Validate a descriptor set.

        An empty descriptor set is valid.

        Args:
            schema: Mapping of field name to descriptor.

        Returns:
            List of validation errors (empty if valid).
        """
        if not isinstance(schema, Mapping):
            return [ErrorDetail("schema", "Schema must be an object of field descriptors", "schema_invalid")]

        errors = []
        for name, config in schema.items():
            field_errors = cls.validate_field_name(name)
            if field_errors:
                errors.extend(field_errors)
                continue
            errors.extend(cls.validate_descriptor(name, config))
        return errors

    @classmethod
    def validate(cls, name: Any, schema: Any) -> list[ErrorDetail]:
        """Validate a complete collection definition."""
        return cls.validate_name(name) + cls.validate_schema(schema)

    @classmethod
    def compile(cls, name: str, schema: Mapping[str, Any]) -> dict[str, FieldDescriptor]:
        """Validate and compile a descriptor set.

        Args:
            name: Collection name.
            schema: Descriptor set in wire format.

        Returns:
            Field name to ``FieldDescriptor``.

        Raises:
            InvalidDescriptorError: If the name or any descriptor is invalid.
        """
        errors = cls.validate(name, schema)
        if errors:
            raise InvalidDescriptorError(
                f"Invalid schema for collection '{name}': {format_details(errors)}",
                details=errors,
            )

        compiled: dict[str, FieldDescriptor] = {}
        for field_name, config in schema.items():
            raw_item = next((config[k] for k in ITEM_KIND_KEYS if config.get(k) is not None), None)
            compiled[field_name] = FieldDescriptor(
                kind=_lookup_enum(FieldKind, config["type"]),
                required=config.get("required", False),
                item_kind=_lookup_enum(ItemKind, raw_item) if raw_item is not None else None,
            )
        return compiled
