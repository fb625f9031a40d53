# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Notification settings routes."""

from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from ..dependencies import get_context, require_user
from ..errors import ValidationFailed

router = APIRouter(prefix="/settings", tags=["settings"], dependencies=[Depends(require_user)])


class SettingsUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    discord_webhook_url: Optional[str] = Field(default=None, alias="discordWebhookUrl")
    discord_enabled: Optional[bool] = Field(default=None, alias="discordEnabled")


def validate_webhook_url(url: str) -> str:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        raise ValidationFailed("discordWebhookUrl must be an http(s) URL") from None
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ValidationFailed("discordWebhookUrl must be an http(s) URL")
    return url


@router.get("")
async def get_settings(request: Request) -> Dict[str, Any]:
    settings = await get_context(request).settings.get()
    return {"status": "ok", "settings": settings.to_dict()}


@router.put("")
async def update_settings(request: Request, payload: Optional[SettingsUpdateRequest] = None) -> Dict[str, Any]:
    """Change only the fields present in the body. An empty or null URL clears it."""
    payload = payload or SettingsUpdateRequest()
    patch: Dict[str, Any] = {}
    if "discord_webhook_url" in payload.model_fields_set:
        url = payload.discord_webhook_url
        patch["discordWebhookUrl"] = validate_webhook_url(url) if url else None
    if "discord_enabled" in payload.model_fields_set and payload.discord_enabled is not None:
        patch["discordEnabled"] = payload.discord_enabled
    if not patch:
        raise ValidationFailed("No data provided for update")

    context = get_context(request)
    settings = await context.settings.update(**patch)
    context.logger.info("Settings updated", fields=sorted(patch))
    return {"status": "ok", "settings": settings.to_dict()}
