"""Firestore Document Store: the data-access façade injected into every route group.

Invariants:
    - One instance per process, wrapping the single async Firestore client
    - Every google.api_core exception is mapped to app.core.errors (NotFound -> 404,
      AlreadyExists -> 409, everything else -> StoreError 503)
    - Returned documents are plain dicts with the document id under "id"
    - verify_store_surface runs before any route is mounted

Design Decisions:
    - No caching or locking: Firestore serializes concurrent writes itself
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Sequence

from google.api_core.exceptions import (
    AlreadyExists, GoogleAPICallError, NotFound, RetryError,
)
from google.cloud.firestore_v1 import FieldFilter, Query

from app.core.errors import (
    ConflictError, FatalInitializationError, ResourceNotFoundError, StoreError,
)
from app.core.store_protocol import Document, Filter, REQUIRED_OPERATIONS

logger = logging.getLogger(__name__)


def _snapshot_to_document(snapshot) -> Document:
    data = snapshot.to_dict() or {}
    return {**data, "id": snapshot.id}


class FirestoreDocumentStore:
    """Mapping-oriented query/mutation interface over an async Firestore client."""

    def __init__(self, client):
        self._client = client

    @asynccontextmanager
    async def _translate_errors(
        self, operation: str, collection: str, doc_id: str | None = None,
    ) -> AsyncIterator[None]:
        try:
            yield
        except NotFound as e:
            raise ResourceNotFoundError(collection, doc_id or "?") from e
        except AlreadyExists as e:
            raise ConflictError(
                f"{collection} '{doc_id}' already exists",
            ) from e
        except (GoogleAPICallError, RetryError) as e:
            logger.error(f"Firestore {operation} on {collection} failed: {e}")
            raise StoreError(str(e), operation) from e

    async def query_documents(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        query = self._client.collection(collection)
        for field_path, op, value in filters:
            query = query.where(filter=FieldFilter(field_path, op, value))
        if order_by:
            direction = Query.DESCENDING if descending else Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        if limit:
            query = query.limit(limit)

        async with self._translate_errors("query", collection):
            return [_snapshot_to_document(s) async for s in query.stream()]

    async def get_document(
        self, collection: str, doc_id: str,
    ) -> Document | None:
        ref = self._client.collection(collection).document(doc_id)
        async with self._translate_errors("get", collection, doc_id):
            snapshot = await ref.get()
        if not snapshot.exists:
            return None
        return _snapshot_to_document(snapshot)

    async def create_document(
        self, collection: str, data: Document, doc_id: str | None = None,
    ) -> Document:
        coll = self._client.collection(collection)
        async with self._translate_errors("create", collection, doc_id):
            if doc_id is None:
                _, ref = await coll.add(data)
            else:
                ref = coll.document(doc_id)
                await ref.create(data)
        return {**data, "id": ref.id}

    async def set_document(
        self, collection: str, doc_id: str, data: Document, merge: bool = False,
    ) -> Document:
        ref = self._client.collection(collection).document(doc_id)
        async with self._translate_errors("set", collection, doc_id):
            await ref.set(data, merge=merge)
            if not merge:
                return {**data, "id": doc_id}
            snapshot = await ref.get()
        return _snapshot_to_document(snapshot)

    async def update_document(
        self, collection: str, doc_id: str, data: Document,
    ) -> Document:
        ref = self._client.collection(collection).document(doc_id)
        async with self._translate_errors("update", collection, doc_id):
            await ref.update(data)
            snapshot = await ref.get()
        return _snapshot_to_document(snapshot)

    async def delete_document(self, collection: str, doc_id: str) -> None:
        ref = self._client.collection(collection).document(doc_id)
        async with self._translate_errors("delete", collection, doc_id):
            await ref.delete()


def exposed_operations(store) -> list[str]:
    return sorted(
        name for name in dir(store)
        if not name.startswith("_") and callable(getattr(store, name, None))
    )


def verify_store_surface(store) -> None:
    """Fail startup unless the store exposes every required operation."""
    methods = exposed_operations(store) if store is not None else []
    missing = [
        name for name in REQUIRED_OPERATIONS
        if not callable(getattr(store, name, None))
    ]
    if missing:
        logger.error(
            "Document store was not initialized correctly",
            extra={"methods": methods, "stage": "data-access"},
        )
        raise FatalInitializationError(
            "data-access", f"Document store is missing operations: {', '.join(missing)}",
        )
    logger.info(
        "Document store initialized successfully",
        extra={"methods": methods},
    )
