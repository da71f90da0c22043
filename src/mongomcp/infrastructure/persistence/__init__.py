"""MongoDB persistence: connection management and the document store adapter."""

from mongomcp.infrastructure.persistence.connector import StoreConnector
from mongomcp.infrastructure.persistence.document_store import DocumentStore, to_json

__all__ = ["DocumentStore", "StoreConnector", "to_json"]
