"""Abstract document/object store contracts shared by every backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4


def new_document_id() -> str:
    """Opaque id in the hosted backend's format (<= 36 chars, alphanumeric)."""

    return uuid4().hex[:20]


class GatewayError(Exception):
    """A call to the persistence backend failed."""


class DocumentNotFound(GatewayError):
    def __init__(self, collection: str, document_id: str):
        super().__init__(f"Document {document_id!r} not found in {collection!r}")
        self.collection = collection
        self.document_id = document_id


class ObjectNotFound(GatewayError):
    def __init__(self, bucket: str, object_id: str):
        super().__init__(f"Object {object_id!r} not found in bucket {bucket!r}")
        self.bucket = bucket
        self.object_id = object_id


@dataclass
class Query:
    """Filters understood by every document store.

    Attribute names use the document (camelCase) naming.
    """

    equal: dict[str, Any] = field(default_factory=dict)
    search: tuple[str, str] | None = None
    order_by: str | None = None
    descending: bool = False
    limit: int = 25
    offset: int = 0


@dataclass
class DocumentList:
    total: int
    documents: list[dict[str, Any]]


@dataclass(frozen=True)
class StoredObject:
    id: str
    bucket: str
    filename: str
    size: int
    content_type: str


class DocumentStore(ABC):
    """Generic document database.

    Documents are plain dicts carrying ``$id``, ``$createdAt`` and
    ``$updatedAt`` next to their attributes.
    """

    @abstractmethod
    def list_documents(self, collection: str, query: Query | None = None) -> DocumentList:
        ...

    @abstractmethod
    def get_document(self, collection: str, document_id: str) -> dict[str, Any]:
        ...

    @abstractmethod
    def create_document(
        self, collection: str, data: dict[str, Any], document_id: str | None = None
    ) -> dict[str, Any]:
        ...

    @abstractmethod
    def update_document(
        self, collection: str, document_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        ...

    @abstractmethod
    def delete_document(self, collection: str, document_id: str) -> None:
        ...

    @abstractmethod
    def increment(
        self,
        collection: str,
        document_id: str,
        attribute: str,
        delta: int,
        *,
        minimum: int | None = None,
    ) -> dict[str, Any]:
        """Atomically add ``delta`` to a numeric attribute, clamped at ``minimum``."""


class ObjectStore(ABC):
    @abstractmethod
    def put_object(
        self,
        bucket: str,
        data: bytes,
        *,
        filename: str,
        content_type: str | None = None,
        object_id: str | None = None,
    ) -> StoredObject:
        ...

    @abstractmethod
    def read_object(self, bucket: str, object_id: str) -> tuple[bytes, StoredObject]:
        ...

    @abstractmethod
    def delete_object(self, bucket: str, object_id: str) -> None:
        ...

    @abstractmethod
    def object_url(self, bucket: str, object_id: str) -> str:
        ...
