"""Record type descriptors and collection schema bindings.

A descriptor declares one field's kind and constraints. A binding associates a
collection name with a set of descriptors and tells the store layer whether
documents must conform to it (strict) or are accepted as-is (schemaless).
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class FieldKind(str, Enum):
    """Supported field kinds for runtime collection schemas."""

    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    DATE = "Date"
    ARRAY = "Array"
    OBJECT = "Object"


class ItemKind(str, Enum):
    """Supported element kinds for Array fields. MIXED means untyped."""

    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    MIXED = "Mixed"


@dataclass(frozen=True)
class FieldDescriptor:
    """Type declaration for one field.

    Attributes:
        kind: The field kind.
        required: Whether a value must be present on insert.
        item_kind: Element kind, only meaningful when kind is ARRAY.
    """

    kind: FieldKind
    required: bool = False
    item_kind: ItemKind | None = None

    def __post_init__(self) -> None:
        if self.item_kind is not None and self.kind is not FieldKind.ARRAY:
            raise ValueError("item_kind is only allowed on Array fields")

    @property
    def effective_item_kind(self) -> ItemKind:
        """Element kind for arrays, defaulting to MIXED."""
        return self.item_kind or ItemKind.MIXED

    def to_dict(self) -> dict[str, object]:
        """Serialize back into the wire format accepted by create_collection."""
        data: dict[str, object] = {"type": self.kind.value, "required": self.required}
        if self.item_kind is not None:
            data["itemType"] = self.item_kind.value
        return data


def _freeze(descriptors: Mapping[str, FieldDescriptor]) -> Mapping[str, FieldDescriptor]:
    return MappingProxyType(dict(descriptors))


@dataclass(frozen=True)
class CollectionBinding:
    """The registry's record of a collection name and its schema.

    Bindings are never mutated; renames produce a copy under the new name.

    Attributes:
        collection_name: Case-sensitive store collection name.
        descriptors: Field name to descriptor. Empty means schemaless.
        strict: True for explicitly created collections.
    """

    collection_name: str
    descriptors: Mapping[str, FieldDescriptor] = field(default_factory=dict)
    strict: bool = False

    def __post_init__(self) -> None:
        if not self.collection_name:
            raise ValueError("Collection name is required")
        object.__setattr__(self, "descriptors", _freeze(self.descriptors))

    @classmethod
    def schemaless(cls, collection_name: str) -> "CollectionBinding":
        """Build the non-strict, empty fallback binding for a collection."""
        return cls(collection_name=collection_name, descriptors={}, strict=False)

    def renamed(self, new_name: str) -> "CollectionBinding":
        """Return a copy of this binding keyed under a new collection name."""
        return CollectionBinding(
            collection_name=new_name,
            descriptors=self.descriptors,
            strict=self.strict,
        )

    @property
    def required_fields(self) -> list[str]:
        return [name for name, d in self.descriptors.items() if d.required]

    def describe(self) -> dict[str, dict[str, object]]:
        """Descriptor set in wire format."""
        return {name: d.to_dict() for name, d in self.descriptors.items()}
