# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""WebSocket endpoint for live dashboards.

Frames are JSON text ``{"event": <name>, "data": <payload>}`` in both
directions. Clients manage their subscriptions with ``subscribe:service``,
``unsubscribe:service``, ``subscribe:level`` and ``unsubscribe:level``,
each carrying the topic value as a string; the server answers each
accepted request with an ``ack`` frame. Anything else is ignored.
"""

import json
from typing import Any, Optional, Tuple

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..broker import NotificationBroker, Topic
from ..context import CollectorContext

router = APIRouter(tags=["realtime"])

SUBSCRIPTION_EVENTS = {
    "subscribe:service": (True, Topic.SERVICE),
    "unsubscribe:service": (False, Topic.SERVICE),
    "subscribe:level": (True, Topic.LEVEL),
    "unsubscribe:level": (False, Topic.LEVEL),
}


def parse_frame(text: str) -> Optional[Tuple[str, Any]]:
    """Return ``(event, data)`` of a client frame, or None if malformed."""
    try:
        frame = json.loads(text)
    except ValueError:
        return None
    if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
        return None
    return frame["event"], frame.get("data")


async def handle_frame(broker: NotificationBroker, context: CollectorContext, session_id: str, text: str) -> None:
    parsed = parse_frame(text)
    if parsed is None:
        context.logger.debug("Ignoring malformed frame", session_id=session_id)
        return

    event, data = parsed
    if event not in SUBSCRIPTION_EVENTS:
        context.logger.debug("Ignoring unknown event", session_id=session_id, event_name=event)
        return
    if not isinstance(data, str) or not data:
        context.logger.debug("Ignoring subscription without topic", session_id=session_id, event_name=event)
        return

    subscribe, topic = SUBSCRIPTION_EVENTS[event]
    if subscribe:
        await broker.subscribe(session_id, topic, data)
    else:
        await broker.unsubscribe(session_id, topic, data)
    await broker.send_direct(session_id, "ack", {"event": event, "topic": data})


@router.websocket("/ws")
async def realtime(websocket: WebSocket) -> None:
    context: CollectorContext = websocket.app.state.collector
    broker = context.broker

    await websocket.accept()
    session_id = await broker.register(websocket)
    try:
        await broker.send_direct(session_id, "connected", {"id": session_id})
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            text = message.get("text")
            if text is None:
                context.logger.debug("Ignoring binary frame", session_id=session_id)
                continue
            await handle_frame(broker, context, session_id, text)
    except WebSocketDisconnect:
        pass
    finally:
        await broker.deregister(session_id)
