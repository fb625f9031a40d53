# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""API key management routes. All of them require a session."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from avalon_auth import UserIdentity

from ..dependencies import get_context, require_user

router = APIRouter(prefix="/api-keys", tags=["api-keys"], dependencies=[Depends(require_user)])

CREATED_MESSAGE = "API Key created successfully. Make sure to copy the key now, you won't be able to see it again."
REGENERATED_MESSAGE = (
    "API Key regenerated successfully. Make sure to copy the new key now, you won't be able to see it again."
)


class CreateApiKeyRequest(BaseModel):
    name: Optional[str] = None
    service: Optional[str] = None


class UpdateApiKeyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    service: Optional[str] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")


@router.get("")
async def list_api_keys(request: Request) -> Dict[str, Any]:
    return {"status": "ok", "apiKeys": await get_context(request).api_key_service.list()}


@router.get("/{key_id}")
async def get_api_key(key_id: str, request: Request) -> Dict[str, Any]:
    return {"status": "ok", "apiKey": await get_context(request).api_key_service.get(key_id)}


@router.post("", status_code=201)
async def create_api_key(
    request: Request,
    payload: Optional[CreateApiKeyRequest] = None,
    user: UserIdentity = Depends(require_user),
) -> Dict[str, Any]:
    payload = payload or CreateApiKeyRequest()
    context = get_context(request)
    api_key = await context.api_key_service.create(payload.name, payload.service, created_by_id=user.user_id)
    context.logger.info("API key created", key_id=api_key["id"], service=api_key["service"], user_id=user.user_id)
    return {"status": "ok", "apiKey": api_key, "message": CREATED_MESSAGE}


@router.put("/{key_id}")
async def update_api_key(key_id: str, request: Request, payload: Optional[UpdateApiKeyRequest] = None) -> Dict[str, Any]:
    payload = payload or UpdateApiKeyRequest()
    api_key = await get_context(request).api_key_service.update(
        key_id,
        name=payload.name,
        service=payload.service,
        is_active=payload.is_active,
    )
    return {"status": "ok", "apiKey": api_key, "message": "API Key updated successfully"}


@router.post("/{key_id}/regenerate")
async def regenerate_api_key(key_id: str, request: Request) -> Dict[str, Any]:
    api_key = await get_context(request).api_key_service.regenerate(key_id)
    return {"status": "ok", "apiKey": api_key, "message": REGENERATED_MESSAGE}


@router.delete("/{key_id}")
async def delete_api_key(key_id: str, request: Request) -> Dict[str, Any]:
    await get_context(request).api_key_service.delete(key_id)
    return {"status": "ok", "message": "API Key deleted successfully"}
