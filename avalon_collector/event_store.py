# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Persistence of error events."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from starlette.concurrency import run_in_threadpool

from avalon_storage import DocumentNotFoundError, DocumentStore, DocumentStoreError
from avalon_storage.document_store import DESCENDING

from .errors import NotFound, StoreFailure
from .models import ErrorEvent, ErrorEventDraft

COLLECTION = "error_events"

# Document stores keep timestamps at millisecond precision
_TICK = timedelta(milliseconds=1)


def _now_ms() -> datetime:
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class EventStore:
    """Stores error events and assigns their id and ``createdAt``.

    ``createdAt`` is taken on the event loop and pushed forward by one tick
    when the clock has not advanced, so timestamps are strictly increasing
    per store instance and listing order always matches insertion order.
    """

    def __init__(self, document_store: DocumentStore):
        self.document_store = document_store
        self._last_created_at: Optional[datetime] = None

    def _next_timestamp(self) -> datetime:
        created_at = _now_ms()
        if self._last_created_at is not None and created_at <= self._last_created_at:
            created_at = self._last_created_at + _TICK
        self._last_created_at = created_at
        return created_at

    async def save(self, draft: ErrorEventDraft) -> ErrorEvent:
        """Persist a normalized report.

        Raises:
            StoreFailure: If the document store rejects the write
        """
        event = ErrorEvent(
            id=str(uuid.uuid4()),
            service=draft.service,
            level=draft.level,
            created_at=self._next_timestamp(),
            message=draft.message,
            stack=draft.stack,
            path=draft.path,
            method=draft.method,
            metadata=draft.metadata,
        )
        try:
            await run_in_threadpool(self.document_store.insert_document, COLLECTION, event.to_document())
        except DocumentStoreError as e:
            raise StoreFailure("Failed to store error event") from e
        return event

    async def list(self, take: int, skip: int = 0) -> List[ErrorEvent]:
        """Newest first."""
        try:
            docs = await run_in_threadpool(
                self.document_store.query_documents,
                COLLECTION,
                {},
                limit=take,
                skip=skip,
                sort_by="createdAt",
                sort_order=DESCENDING,
            )
        except DocumentStoreError as e:
            raise StoreFailure("Failed to list error events") from e
        return [ErrorEvent.from_document(doc) for doc in docs]

    async def delete(self, event_id: str) -> None:
        try:
            await run_in_threadpool(self.document_store.delete_document, COLLECTION, event_id)
        except DocumentNotFoundError:
            raise NotFound("Error not found") from None
        except DocumentStoreError as e:
            raise StoreFailure("Failed to delete error event") from e

    async def delete_all(self) -> int:
        return await self._delete_matching({})

    async def delete_by_service(self, service: str) -> int:
        return await self._delete_matching({"service": service})

    async def _delete_matching(self, filter_dict: dict) -> int:
        try:
            return await run_in_threadpool(self.document_store.delete_documents, COLLECTION, filter_dict)
        except DocumentStoreError as e:
            raise StoreFailure("Failed to delete error events") from e
