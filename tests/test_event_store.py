# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Tests for error event persistence."""

import pytest

from avalon_collector.errors import NotFound, StoreFailure
from avalon_collector.event_store import COLLECTION, EventStore
from avalon_collector.models import ErrorEventDraft
from avalon_storage import DocumentStoreError, InMemoryDocumentStore


class BrokenDocumentStore(InMemoryDocumentStore):
    def insert_document(self, collection, doc):
        raise DocumentStoreError("disk full")

    def query_documents(self, *args, **kwargs):
        raise DocumentStoreError("disk full")


def draft(service="billing", level="error", **fields):
    return ErrorEventDraft(service=service, level=level, **fields)


@pytest.fixture
def events(document_store):
    return EventStore(document_store)


class TestSave:
    """Tests for EventStore.save."""

    @pytest.mark.asyncio
    async def test_assigns_id_and_timestamp(self, events, document_store):
        event = await events.save(draft(message="boom", metadata={"userId": 1}))

        assert event.id
        assert event.created_at.tzinfo is not None
        assert event.created_at.microsecond % 1000 == 0
        stored = document_store.get_document(COLLECTION, event.id)
        assert stored["message"] == "boom"
        assert stored["metadata"] == {"userId": 1}

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, events):
        ids = {(await events.save(draft())).id for _ in range(20)}
        assert len(ids) == 20

    @pytest.mark.asyncio
    async def test_timestamps_strictly_increase(self, events):
        """Test that rapid saves never share a createdAt."""
        saved = [await events.save(draft()) for _ in range(50)]
        stamps = [event.created_at for event in saved]

        assert all(earlier < later for earlier, later in zip(stamps, stamps[1:]))

    @pytest.mark.asyncio
    async def test_store_error_becomes_store_failure(self):
        with pytest.raises(StoreFailure, match="Failed to store error event"):
            await EventStore(BrokenDocumentStore()).save(draft())


class TestQueries:
    """Tests for listing and deletion."""

    @pytest.mark.asyncio
    async def test_list_newest_first_with_paging(self, events):
        saved = [await events.save(draft(message=str(i))) for i in range(5)]

        page = await events.list(take=2, skip=1)
        everything = await events.list(take=10)

        assert [event.id for event in page] == [saved[3].id, saved[2].id]
        assert [event.id for event in everything] == [event.id for event in reversed(saved)]

    @pytest.mark.asyncio
    async def test_list_zero_take_is_empty(self, events):
        await events.save(draft())
        assert await events.list(take=0) == []

    @pytest.mark.asyncio
    async def test_list_store_error(self):
        with pytest.raises(StoreFailure):
            await EventStore(BrokenDocumentStore()).list(take=10)

    @pytest.mark.asyncio
    async def test_list_round_trips_fields(self, events):
        saved = await events.save(draft(level="fatal", stack="trace", path="/x", method="POST", metadata=[1, "a"]))

        assert await events.list(take=1) == [saved]

    @pytest.mark.asyncio
    async def test_delete(self, events):
        saved = await events.save(draft())
        await events.delete(saved.id)

        with pytest.raises(NotFound, match="Error not found"):
            await events.delete(saved.id)

    @pytest.mark.asyncio
    async def test_delete_by_service_and_all(self, events, document_store):
        for service in ("billing", "billing", "search"):
            await events.save(draft(service=service))

        assert await events.delete_by_service("billing") == 2
        assert await events.delete_by_service("billing") == 0
        assert document_store.count_documents(COLLECTION, {"service": "search"}) == 1
        assert await events.delete_all() == 1
        assert document_store.count_documents(COLLECTION, {}) == 0
