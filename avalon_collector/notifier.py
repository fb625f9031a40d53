# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Discord webhook notifications for error events."""

from typing import Any, Dict, List, Optional

import httpx

from .errors import NotificationFailure
from .models import ErrorEvent
from .settings_store import SettingsStore

DEFAULT_COLOR = 0x808080
DEFAULT_EMOJI = "⚠️"

LEVEL_COLORS = {
    "error": 0xFF0000,
    "warning": 0xFFA500,
    "warn": 0xFFA500,
    "info": 0x00BFFF,
    "debug": 0x808080,
    "fatal": 0x8B0000,
    "critical": 0xDC143C,
}

LEVEL_EMOJIS = {
    "error": "\U0001f534",
    "warning": "\U0001f7e0",
    "warn": "\U0001f7e0",
    "info": "\U0001f535",
    "debug": "⚪",
    "fatal": "\U0001f480",
    "critical": "\U0001f6a8",
}

MAX_DESCRIPTION_LENGTH = 1900
MAX_STACK_LENGTH = 1000
TRUNCATION_MARKER = "\n... [truncated]"
FOOTER_TEXT = "Avalon Error Collector"


def level_color(level: str) -> int:
    return LEVEL_COLORS.get(level.lower(), DEFAULT_COLOR)


def level_emoji(level: str) -> str:
    return LEVEL_EMOJIS.get(level.lower(), DEFAULT_EMOJI)


def build_embed(event: ErrorEvent) -> Dict[str, Any]:
    """Render an event as a Discord embed.

    Unrecognized levels fall back to gray and a generic warning emoji.
    """
    emoji = level_emoji(event.level)
    level = event.level.upper()

    fields: List[Dict[str, Any]] = [
        {"name": "\U0001f4e6 Service", "value": f"`{event.service}`", "inline": True},
        {"name": "⚠️ Level", "value": f"{emoji} `{level}`", "inline": True},
        {"name": "\U0001f194 ID", "value": f"`{event.id}`", "inline": True},
    ]

    if event.path:
        fields.append({
            "name": "\U0001f517 Path",
            "value": f"`{event.method or 'GET'} {event.path}`",
            "inline": False,
        })

    if event.stack:
        stack = event.stack
        if len(stack) > MAX_STACK_LENGTH:
            stack = stack[:MAX_STACK_LENGTH] + TRUNCATION_MARKER
        fields.append({
            "name": "\U0001f4dc Stack Trace",
            "value": f"```\n{stack}\n```",
            "inline": False,
        })

    description = event.message or "No error message provided"
    if len(description) > MAX_DESCRIPTION_LENGTH:
        description = description[:MAX_DESCRIPTION_LENGTH] + TRUNCATION_MARKER

    return {
        "title": f"{emoji} {level} - {event.service}",
        "description": description,
        "color": level_color(event.level),
        "fields": fields,
        "timestamp": event.to_dict()["createdAt"],
        "footer": {"text": FOOTER_TEXT},
    }


class DiscordNotifier:
    """Posts error events to the Discord webhook named in the settings.

    Settings are read on every call, so enabling, disabling or changing the
    URL takes effect on the next event.
    """

    def __init__(self, settings_store: SettingsStore, http_client: httpx.AsyncClient,
                 timeout: Optional[float] = 5.0):
        self.settings_store = settings_store
        self.http_client = http_client
        self.timeout = timeout

    async def notify(self, event: ErrorEvent) -> bool:
        """Send the event if notifications are enabled.

        Returns:
            True if the webhook accepted the message, False if notifications are off

        Raises:
            NotificationFailure: If the webhook could not be reached or rejected the message
        """
        settings = await self.settings_store.get()
        if not settings.discord_enabled or not settings.discord_webhook_url:
            return False

        try:
            response = await self.http_client.post(
                settings.discord_webhook_url,
                json={"embeds": [build_embed(event)]},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NotificationFailure(f"Discord webhook failed: {e}") from e
        return True
