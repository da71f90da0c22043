"""Schema registry mapping collection names to runtime schema bindings.

The registry is the single place that decides which schema applies to a
collection. Explicitly created collections get strict bindings compiled from a
descriptor set; any other collection name resolves to a cached schemaless
binding so that collections created outside this server remain usable.
Thread-safe implementation for concurrent access.
"""

import threading
from typing import Any, Mapping

from mongomcp.core.logging import get_logger
from mongomcp.domain.entities.descriptor import CollectionBinding
from mongomcp.domain.services.descriptor_validator import DescriptorValidator

logger = get_logger(__name__)


class SchemaRegistry:
    """Owned, lock-guarded map of collection name to ``CollectionBinding``.

    Each instance is independent, so tests and servers can hold isolated
    registries.

    Example:
        registry = SchemaRegistry()
        registry.define("books", {"title": {"type": "String", "required": True}})
        registry.resolve("books").strict          # True
        registry.resolve("legacy_logs").strict    # False, schemaless fallback
    """

    def __init__(self) -> None:
        self._bindings: dict[str, CollectionBinding] = {}
        self._lock = threading.RLock()

    def define(self, collection_name: str, descriptor_set: Mapping[str, Any]) -> CollectionBinding:
        """Compile a descriptor set and bind it to a collection name.

        Any prior binding for the name is replaced (last write wins).

        Args:
            collection_name: Case-sensitive collection name.
            descriptor_set: Field name to descriptor, in wire format.

        Returns:
            The new strict binding.

        Raises:
            InvalidDescriptorError: If the name or any descriptor is invalid.
                The registry is left unchanged.
        """
        descriptors = DescriptorValidator.compile(collection_name, descriptor_set)
        binding = CollectionBinding(
            collection_name=collection_name,
            descriptors=descriptors,
            strict=True,
        )

        with self._lock:
            replaced = collection_name in self._bindings
            self._bindings[collection_name] = binding

        logger.debug(
            "Schema binding defined",
            collection_name=collection_name,
            field_count=len(descriptors),
            replaced=replaced,
        )
        return binding

    def resolve(self, collection_name: str) -> CollectionBinding:
        """Return the binding for a collection, creating a schemaless one if absent.

        Never fails. Repeated calls for an unbound name return the same
        cached binding object.
        """
        with self._lock:
            binding = self._bindings.get(collection_name)
            if binding is None:
                binding = CollectionBinding.schemaless(collection_name)
                self._bindings[collection_name] = binding
                logger.debug("Schemaless binding created", collection_name=collection_name)
            return binding

    def rekey(self, old_name: str, new_name: str) -> None:
        """Move the binding under ``old_name`` to ``new_name``.

        Overwrites any binding already under ``new_name``. A no-op when
        ``old_name`` is unbound.
        """
        with self._lock:
            binding = self._bindings.pop(old_name, None)
            if binding is None:
                return
            self._bindings[new_name] = binding.renamed(new_name)

        logger.debug("Schema binding rekeyed", old_name=old_name, new_name=new_name)

    def forget(self, collection_name: str) -> None:
        """Remove the binding for a collection. A no-op when absent."""
        with self._lock:
            removed = self._bindings.pop(collection_name, None)

        if removed is not None:
            logger.debug("Schema binding forgotten", collection_name=collection_name)

    def get(self, collection_name: str) -> CollectionBinding | None:
        """Return the binding for a collection without synthesizing one."""
        with self._lock:
            return self._bindings.get(collection_name)

    def names(self) -> list[str]:
        """Names of all bound collections, sorted."""
        with self._lock:
            return sorted(self._bindings)

    def clear(self) -> None:
        """Drop every binding. Used on teardown."""
        with self._lock:
            self._bindings.clear()

    def __contains__(self, collection_name: object) -> bool:
        with self._lock:
            return collection_name in self._bindings

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)
