# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Administrator login, token verification and profile routes."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from avalon_auth import UserIdentity

from ..dependencies import get_context, require_user
from ..errors import Unauthenticated, ValidationFailed

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: Optional[str] = None
    current_password: Optional[str] = Field(default=None, alias="currentPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")


@router.post("/login")
async def login(request: Request, payload: Optional[LoginRequest] = None) -> Dict[str, Any]:
    if payload is None or not payload.username or not payload.password:
        raise ValidationFailed("Username and password are required")

    context = get_context(request)
    result = await context.auth.login(payload.username, payload.password)
    if result is None:
        context.metrics.increment("auth_failures_total", tags={"kind": "login"})
        raise Unauthenticated("Invalid credentials")
    return {"status": "ok", **result}


@router.get("/verify")
async def verify(user: UserIdentity = Depends(require_user)) -> Dict[str, Any]:
    return {"status": "ok", "user": user.to_dict()}


@router.put("/profile")
async def update_profile(
    request: Request,
    payload: Optional[ProfileUpdateRequest] = None,
    user: UserIdentity = Depends(require_user),
) -> Dict[str, Any]:
    payload = payload or ProfileUpdateRequest()
    updated = await get_context(request).auth.update_profile(
        user.user_id,
        username=payload.username,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return {"status": "ok", "user": updated}
