# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Tests for the ingestion pipeline."""

import asyncio
import json

import httpx
import pytest

from avalon_auth import ServiceIdentity
from avalon_collector.broker import CHANNEL_NEW, NotificationBroker
from avalon_collector.error_log import ErrorFileLogger
from avalon_collector.errors import StoreFailure
from avalon_collector.event_store import EventStore
from avalon_collector.ingestion import IngestionCoordinator, normalize_report
from avalon_collector.models import ErrorReport
from avalon_collector.notifier import DiscordNotifier
from avalon_collector.settings_store import SettingsStore
from avalon_logging import StdoutLogger
from avalon_storage import DocumentStoreError, InMemoryDocumentStore

from .helpers import RecordingTransport, StalledTransport

IDENTITY = ServiceIdentity(service="billing", key_id="key-1", key_name="Billing")


class RejectingEventsStore(InMemoryDocumentStore):
    def insert_document(self, collection, doc):
        if collection == "error_events":
            raise DocumentStoreError("write rejected")
        return super().insert_document(collection, doc)


def build_coordinator(document_store, http_client, logger, metrics, log_path, webhook_enabled=True, send_timeout=5.0):
    settings = SettingsStore(
        document_store,
        default_webhook_url="https://discord.example/hook",
        default_enabled=webhook_enabled,
    )
    broker = NotificationBroker(logger=logger, metrics=metrics, send_timeout=send_timeout)
    coordinator = IngestionCoordinator(
        EventStore(document_store),
        broker,
        DiscordNotifier(settings, http_client),
        ErrorFileLogger(log_path),
        logger=logger,
        metrics=metrics,
    )
    return coordinator, broker


class TestNormalizeReport:
    """Tests for report normalization."""

    def test_service_comes_from_identity(self):
        draft = normalize_report(ErrorReport(service="payments"), "billing")
        assert draft.service == "billing"

    def test_defaults(self):
        draft = normalize_report(ErrorReport(), "billing")

        assert draft.level == "error"
        assert draft.message is None
        assert draft.stack is None
        assert draft.metadata is None

    def test_empty_strings_become_none(self):
        report = ErrorReport.model_validate({"level": "", "error": {"message": "", "stack": "", "path": "/x"}})
        draft = normalize_report(report, "billing")

        assert draft.level == "error"
        assert draft.message is None
        assert draft.stack is None
        assert draft.path == "/x"

    def test_unknown_level_is_kept(self):
        assert normalize_report(ErrorReport(level="notice"), "billing").level == "notice"

    def test_extra_fields_are_ignored(self):
        report = ErrorReport.model_validate({"error": {"message": "m", "code": 42}, "foo": "bar"})
        assert normalize_report(report, "billing").message == "m"


class TestIngest:
    """Tests for IngestionCoordinator.ingest."""

    @pytest.mark.asyncio
    async def test_full_pipeline(self, document_store, http_client, webhook, silent_logger, metrics, tmp_path):
        log_path = tmp_path / "errors.log"
        coordinator, broker = build_coordinator(document_store, http_client, silent_logger, metrics, str(log_path))
        transport = RecordingTransport()
        await broker.register(transport)

        event = await coordinator.ingest(
            ErrorReport.model_validate({"level": "fatal", "error": {"message": "Database timeout"}}),
            IDENTITY,
        )

        assert event.service == "billing"
        assert event.level == "fatal"
        assert transport.frames == [{"event": CHANNEL_NEW, "data": event.to_dict()}]
        assert len(webhook.requests) == 1
        line = json.loads(log_path.read_text().strip())
        assert line == {
            "id": event.id,
            "service": "billing",
            "message": "Database timeout",
            "createdAt": event.to_dict()["createdAt"],
        }
        assert metrics.get_counter_total("events_ingested_total", tags={"level": "fatal"}) == 1
        assert metrics.get_counter_total("webhook_deliveries_total", tags={"status": "sent"}) == 1

    @pytest.mark.asyncio
    async def test_spoofed_service_is_logged(self, document_store, http_client, silent_logger, metrics, tmp_path):
        coordinator, _ = build_coordinator(document_store, http_client, silent_logger, metrics, "")

        event = await coordinator.ingest(ErrorReport(service="payments"), IDENTITY)

        assert event.service == "billing"
        assert silent_logger.has_log("Report claimed a different service", level="WARNING")

    @pytest.mark.asyncio
    async def test_store_failure_notifies_nothing(self, http_client, webhook, silent_logger, metrics, tmp_path):
        """Test that a failed write produces no webhook, broadcast or log line."""
        log_path = tmp_path / "errors.log"
        store = RejectingEventsStore()
        store.connect()
        coordinator, broker = build_coordinator(store, http_client, silent_logger, metrics, str(log_path))
        transport = RecordingTransport()
        await broker.register(transport)

        with pytest.raises(StoreFailure):
            await coordinator.ingest(ErrorReport(), IDENTITY)

        assert transport.frames == []
        assert webhook.requests == []
        assert not log_path.exists()
        assert metrics.get_counter_total("ingestion_failures_total", tags={"stage": "persist"}) == 1

    @pytest.mark.asyncio
    async def test_webhook_failure_does_not_block_broadcast(
        self, document_store, http_client, webhook, silent_logger, metrics
    ):
        webhook.error = httpx.ConnectError("connection refused")
        coordinator, broker = build_coordinator(document_store, http_client, silent_logger, metrics, "")
        transport = RecordingTransport()
        await broker.register(transport)

        event = await coordinator.ingest(ErrorReport(), IDENTITY)

        assert transport.events() == [CHANNEL_NEW]
        assert event.id
        assert metrics.get_counter_total("webhook_deliveries_total", tags={"status": "failed"}) == 1
        assert silent_logger.has_log("Webhook notification failed", level="ERROR")

    @pytest.mark.asyncio
    async def test_disabled_webhook_is_counted(self, document_store, http_client, webhook, silent_logger, metrics):
        coordinator, _ = build_coordinator(
            document_store, http_client, silent_logger, metrics, "", webhook_enabled=False
        )

        await coordinator.ingest(ErrorReport(), IDENTITY)

        assert webhook.requests == []
        assert metrics.get_counter_total("webhook_deliveries_total", tags={"status": "disabled"}) == 1

    @pytest.mark.asyncio
    async def test_error_log_failure_is_isolated(
        self, document_store, http_client, webhook, silent_logger, metrics, tmp_path
    ):
        # A directory cannot be opened for appending
        coordinator, broker = build_coordinator(document_store, http_client, silent_logger, metrics, str(tmp_path))
        transport = RecordingTransport()
        await broker.register(transport)

        await coordinator.ingest(ErrorReport(), IDENTITY)

        assert transport.events() == [CHANNEL_NEW]
        assert len(webhook.requests) == 1
        assert metrics.get_counter_total("ingestion_failures_total", tags={"stage": "error_log"}) == 1

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_fail_ingest(self, document_store, http_client, silent_logger, metrics):
        coordinator, broker = build_coordinator(document_store, http_client, silent_logger, metrics, "")
        healthy = RecordingTransport()
        await broker.register(RecordingTransport(fail=True))
        await broker.register(healthy)

        await coordinator.ingest(ErrorReport(), IDENTITY)

        assert healthy.events() == [CHANNEL_NEW]

    @pytest.mark.asyncio
    async def test_stalled_subscriber_does_not_block_ingest(self, document_store, http_client, silent_logger, metrics):
        coordinator, broker = build_coordinator(
            document_store, http_client, silent_logger, metrics, "", send_timeout=0.05
        )
        stalled = StalledTransport()
        healthy = RecordingTransport()
        await broker.register(stalled)
        await broker.register(healthy)

        event = await asyncio.wait_for(coordinator.ingest(ErrorReport(), IDENTITY), timeout=2)

        assert healthy.frames == [{"event": CHANNEL_NEW, "data": event.to_dict()}]
        assert stalled.attempts == 1
        assert metrics.get_counter_total("broker_deliveries_total", tags={"outcome": "failed"}) == 1
        assert silent_logger.has_log("Subscriber send timed out", level="WARNING")

    @pytest.mark.asyncio
    async def test_stdout_logger_records_stored_event(self, document_store, http_client, metrics, capsys):
        """Test the full pipeline with the JSON stdout logger used in production."""
        logger = StdoutLogger(level="INFO", name="avalon_collector.ingestion.test")
        coordinator, broker = build_coordinator(document_store, http_client, logger, metrics, "")
        transport = RecordingTransport()
        await broker.register(transport)

        event = await coordinator.ingest(ErrorReport(level="critical"), IDENTITY)

        assert transport.events() == [CHANNEL_NEW]
        records = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
        stored = [record for record in records if record["message"] == "Error event stored"]
        assert stored[0]["level"] == "INFO"
        assert stored[0]["extra"] == {"event_id": event.id, "service": "billing", "event_level": "critical"}
