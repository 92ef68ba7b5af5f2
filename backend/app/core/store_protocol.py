"""Boundary Protocol: the data-access contract injected into every route group.

Invariants:
    - Route code depends on DocumentStore only, never on the Firestore client
    - REQUIRED_OPERATIONS is the surface verified at startup before any route mounts
    - Documents cross the boundary as plain dicts carrying their "id"

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
"""

from typing import Any, Protocol, Sequence

Document = dict[str, Any]
Filter = tuple[str, str, Any]

REQUIRED_OPERATIONS: tuple[str, ...] = (
    "query_documents",
    "get_document",
    "create_document",
    "set_document",
    "update_document",
    "delete_document",
)


class DocumentStore(Protocol):
    """Contract for document persistence: implemented by infrastructure."""

    async def query_documents(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]: ...

    async def get_document(
        self, collection: str, doc_id: str,
    ) -> Document | None: ...

    async def create_document(
        self, collection: str, data: Document, doc_id: str | None = None,
    ) -> Document: ...

    async def set_document(
        self, collection: str, doc_id: str, data: Document, merge: bool = False,
    ) -> Document: ...

    async def update_document(
        self, collection: str, doc_id: str, data: Document,
    ) -> Document: ...

    async def delete_document(self, collection: str, doc_id: str) -> None: ...
