# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Notification fan-out broker.

Owns the live subscriber sessions of this process and their topic
memberships, and delivers error events to them. Delivery is best effort
and at most once: nothing is buffered for slow or disconnected sessions
and nothing is replayed on reconnect.

Registry mutations and the computation of a delivery plan happen under a
single asyncio lock. Sending happens outside the lock against a snapshot,
so a slow client never blocks subscribe/unsubscribe calls or other
publishes, and a session removed mid-delivery is skipped rather than
raising.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple

from avalon_logging import Logger, create_logger
from avalon_metrics import MetricsCollector, NoOpMetricsCollector

from .models import ErrorEvent

CHANNEL_NEW = "error:new"
CHANNEL_SERVICE = "error:service"
CHANNEL_LEVEL = "error:level"

# Seconds a single frame may take before the session is treated as gone
DEFAULT_SEND_TIMEOUT = 5.0


class Topic(str, Enum):
    SERVICE = "service"
    LEVEL = "level"


class Transport(Protocol):
    async def send_json(self, data: Any) -> None:
        ...


@dataclass(eq=False)
class SubscriberSession:
    id: str
    transport: Transport
    services: set = field(default_factory=set)
    levels: set = field(default_factory=set)
    connected: bool = True
    # Keeps frames of concurrent publishes from interleaving on one socket
    send_lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def topics(self, topic: Topic) -> set:
        return self.services if topic is Topic.SERVICE else self.levels


@dataclass
class DeliveryReport:
    delivered: int = 0
    skipped: int = 0
    failed: int = 0

    def merge(self, other: "DeliveryReport") -> None:
        self.delivered += other.delivered
        self.skipped += other.skipped
        self.failed += other.failed


class NotificationBroker:
    """In-process publish/subscribe hub for live dashboard sessions."""

    def __init__(
        self,
        logger: Optional[Logger] = None,
        metrics: Optional[MetricsCollector] = None,
        send_timeout: float = DEFAULT_SEND_TIMEOUT,
    ):
        self.logger = logger or create_logger(logger_type="stdout", level="INFO", name="avalon_collector.broker")
        self.metrics = metrics or NoOpMetricsCollector()
        self.send_timeout = send_timeout
        self._sessions: Dict[str, SubscriberSession] = {}
        self._lock = asyncio.Lock()

    @property
    def connected_count(self) -> int:
        return len(self._sessions)

    async def register(self, transport: Transport) -> str:
        """Create a session with no subscriptions and return its id."""
        session = SubscriberSession(id=uuid.uuid4().hex, transport=transport)
        async with self._lock:
            self._sessions[session.id] = session
            count = len(self._sessions)
        self.metrics.gauge("subscribers_connected", count)
        self.logger.info("Subscriber connected", session_id=session.id, connected=count)
        return session.id

    async def deregister(self, session_id: str) -> None:
        """Drop a session and all of its memberships. Unknown ids are ignored."""
        async with self._lock:
            session = self._sessions.pop(session_id, None)
            count = len(self._sessions)
        if session is None:
            return
        session.connected = False
        self.metrics.gauge("subscribers_connected", count)
        self.logger.info("Subscriber disconnected", session_id=session_id, connected=count)

    async def subscribe(self, session_id: str, topic: Topic, value: str) -> bool:
        """Add a topic membership. Idempotent.

        Returns:
            False if the session is unknown, True otherwise
        """
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            session.topics(topic).add(value)
        self.logger.debug("Subscribed", session_id=session_id, topic=topic.value, value=value)
        return True

    async def unsubscribe(self, session_id: str, topic: Topic, value: str) -> bool:
        """Remove a topic membership. Removing an absent membership is a no-op.

        Returns:
            False if the session is unknown, True otherwise
        """
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            session.topics(topic).discard(value)
        self.logger.debug("Unsubscribed", session_id=session_id, topic=topic.value, value=value)
        return True

    async def subscriptions(self, session_id: str) -> Optional[Dict[str, List[str]]]:
        """Copy of a session's memberships, or None for an unknown session."""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            return {"services": sorted(session.services), "levels": sorted(session.levels)}

    async def publish(self, event: ErrorEvent) -> DeliveryReport:
        """Deliver an event to every matching session.

        Every connected session receives ``error:new``. Sessions subscribed
        to the event's service also receive ``error:service``, and sessions
        subscribed to its level also receive ``error:level``, in that order.
        A session in both groups gets all three frames.
        """
        payload = event.to_dict()
        async with self._lock:
            plan = []
            for session in self._sessions.values():
                channels = [CHANNEL_NEW]
                if event.service in session.services:
                    channels.append(CHANNEL_SERVICE)
                if event.level in session.levels:
                    channels.append(CHANNEL_LEVEL)
                plan.append((session, [(channel, payload) for channel in channels]))

        report = await self._deliver(plan)
        self.logger.debug(
            "Published error event",
            event_id=event.id,
            delivered=report.delivered,
            skipped=report.skipped,
            failed=report.failed,
        )
        return report

    async def broadcast(self, event_name: str, data: Any) -> DeliveryReport:
        """Send an arbitrary event to every connected session."""
        async with self._lock:
            plan = [(session, [(event_name, data)]) for session in self._sessions.values()]
        return await self._deliver(plan)

    async def send_direct(self, session_id: str, event_name: str, data: Any) -> bool:
        """Send one frame to a single session.

        Returns:
            True if the frame was written
        """
        async with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            return False
        report = await self._deliver_to_session(session, [(event_name, data)])
        return report.delivered == 1

    async def _deliver(self, plan: List[Tuple[SubscriberSession, List[Tuple[str, Any]]]]) -> DeliveryReport:
        total = DeliveryReport()
        if not plan:
            return total
        reports = await asyncio.gather(
            *(self._deliver_to_session(session, frames) for session, frames in plan)
        )
        for report in reports:
            total.merge(report)
        return total

    async def _deliver_to_session(self, session: SubscriberSession, frames: List[Tuple[str, Any]]) -> DeliveryReport:
        report = DeliveryReport()
        async with session.send_lock:
            for index, (channel, data) in enumerate(frames):
                if not session.connected:
                    report.skipped += len(frames) - index
                    self.metrics.increment("broker_deliveries_total", len(frames) - index, tags={"outcome": "skipped"})
                    break
                try:
                    await asyncio.wait_for(
                        session.transport.send_json({"event": channel, "data": data}),
                        timeout=self.send_timeout,
                    )
                except asyncio.TimeoutError:
                    # A stalled client is dropped from delivery until it deregisters
                    session.connected = False
                    report.failed += 1
                    report.skipped += len(frames) - index - 1
                    self.metrics.increment("broker_deliveries_total", tags={"outcome": "failed"})
                    self.logger.warning(
                        "Subscriber send timed out; marking session disconnected",
                        session_id=session.id,
                        channel=channel,
                        timeout=self.send_timeout,
                    )
                    break
                except Exception as e:
                    # The socket is unusable; drop the rest of this session's frames
                    report.failed += 1
                    report.skipped += len(frames) - index - 1
                    self.metrics.increment("broker_deliveries_total", tags={"outcome": "failed"})
                    self.logger.warning(
                        "Failed to deliver to subscriber",
                        session_id=session.id,
                        channel=channel,
                        error=str(e),
                    )
                    break
                report.delivered += 1
                self.metrics.increment("broker_deliveries_total", tags={"outcome": "delivered"})
        return report
