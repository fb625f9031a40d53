# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Ingestion of error reports.

A report moves through authenticate, normalize, persist, notify and
acknowledge. Authentication happens in the HTTP layer before the body is
read. Once an event is persisted, the log file, the webhook and the live
broadcast each run in isolation: none of their failures reach the
reporting client and none of them prevents the others.
"""

import asyncio
from typing import Optional

from avalon_auth import ServiceIdentity
from avalon_logging import Logger, create_logger
from avalon_metrics import MetricsCollector, NoOpMetricsCollector

from .broker import NotificationBroker
from .error_log import ErrorFileLogger
from .event_store import EventStore
from .models import DEFAULT_LEVEL, ErrorEvent, ErrorEventDraft, ErrorReport
from .notifier import DiscordNotifier


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    return value if value else None


def normalize_report(report: ErrorReport, service: str) -> ErrorEventDraft:
    """Turn an inbound report into a draft event.

    The service always comes from the caller's identity, never from the
    payload. Empty strings become None and a missing level becomes "error".
    The payload timestamp is ignored.
    """
    details = report.error
    return ErrorEventDraft(
        service=service,
        level=report.level or DEFAULT_LEVEL,
        message=_blank_to_none(details.message) if details else None,
        stack=_blank_to_none(details.stack) if details else None,
        path=_blank_to_none(details.path) if details else None,
        method=_blank_to_none(details.method) if details else None,
        metadata=report.metadata,
    )


class IngestionCoordinator:
    def __init__(
        self,
        event_store: EventStore,
        broker: NotificationBroker,
        notifier: DiscordNotifier,
        error_log: ErrorFileLogger,
        logger: Optional[Logger] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.event_store = event_store
        self.broker = broker
        self.notifier = notifier
        self.error_log = error_log
        self.logger = logger or create_logger(logger_type="stdout", level="INFO", name="avalon_collector.ingestion")
        self.metrics = metrics or NoOpMetricsCollector()

    async def ingest(self, report: ErrorReport, identity: ServiceIdentity) -> ErrorEvent:
        """Persist a report for an authenticated service and notify.

        Raises:
            StoreFailure: If persistence fails; nothing is notified
        """
        if report.service and report.service != identity.service:
            self.logger.warning(
                "Report claimed a different service; using the API key's service",
                claimed=report.service,
                service=identity.service,
                key_id=identity.key_id,
            )

        draft = normalize_report(report, identity.service)

        try:
            event = await self.event_store.save(draft)
        except Exception:
            self.metrics.increment("ingestion_failures_total", tags={"stage": "persist"})
            raise

        self.metrics.increment("events_ingested_total", tags={"level": event.level})
        self.logger.info("Error event stored", event_id=event.id, service=event.service, event_level=event.level)

        await self._append_to_log(event)
        await asyncio.gather(self._notify_webhook(event), self._fan_out(event))
        return event

    async def _append_to_log(self, event: ErrorEvent) -> None:
        try:
            await self.error_log.append(event)
        except Exception as e:
            self.metrics.increment("ingestion_failures_total", tags={"stage": "error_log"})
            self.logger.error("Failed to write error log file", event_id=event.id, error=str(e))

    async def _notify_webhook(self, event: ErrorEvent) -> None:
        try:
            sent = await self.notifier.notify(event)
        except Exception as e:
            self.metrics.increment("webhook_deliveries_total", tags={"status": "failed"})
            self.logger.error("Webhook notification failed", event_id=event.id, error=str(e))
            return
        self.metrics.increment("webhook_deliveries_total", tags={"status": "sent" if sent else "disabled"})

    async def _fan_out(self, event: ErrorEvent) -> None:
        try:
            await self.broker.publish(event)
        except Exception as e:
            self.metrics.increment("ingestion_failures_total", tags={"stage": "broadcast"})
            self.logger.error("Broadcast failed", event_id=event.id, error=str(e))
