# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Helpers shared by the test suite."""

import asyncio
from datetime import datetime, timezone
from typing import Optional

from avalon_collector.models import ErrorEvent

TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "passwordAdmin"

EVENT_TIME = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


def create_api_key(client, admin_headers, service: str, name: Optional[str] = None) -> dict:
    """Create an API key through the API and return its JSON record."""
    response = client.post(
        "/api-keys",
        json={"name": name or f"{service} key", "service": service},
        headers=admin_headers,
    )
    assert response.status_code == 201
    return response.json()["apiKey"]


def report(client, api_key: str, payload: Optional[dict] = None):
    return client.post("/report", json=payload if payload is not None else {}, headers={"X-API-Key": api_key})


def connect(client):
    """Open a dashboard WebSocket and consume its ``connected`` frame."""
    ws = client.websocket_connect("/ws")
    ws.__enter__()
    hello = ws.receive_json()
    assert hello["event"] == "connected"
    return ws


def make_event(event_id: str = "evt-1", service: str = "billing", level: str = "error", **fields) -> ErrorEvent:
    fields.setdefault("created_at", EVENT_TIME)
    return ErrorEvent(id=event_id, service=service, level=level, **fields)


class RecordingTransport:
    """Stand-in for a WebSocket that keeps every frame sent to it."""

    def __init__(self, fail: bool = False):
        self.frames = []
        self.fail = fail

    async def send_json(self, data) -> None:
        if self.fail:
            raise ConnectionResetError("socket closed")
        self.frames.append(data)

    def events(self) -> list:
        return [frame["event"] for frame in self.frames]


class StalledTransport:
    """A WebSocket whose client stopped reading: sends never complete."""

    def __init__(self):
        self.attempts = 0
        self._drained = asyncio.Event()

    async def send_json(self, data) -> None:
        self.attempts += 1
        await self._drained.wait()
