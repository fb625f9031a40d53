# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Credential resolution for reporting services and administrators."""

import asyncio
from typing import Any, Optional, Protocol

import jwt

from avalon_logging import create_logger

from .jwt_manager import JWTManager
from .models import ServiceIdentity, UserIdentity

logger = create_logger(logger_type="stdout", level="INFO", name="avalon_auth.gate")


class ApiKeyRepository(Protocol):
    """Lookup side of the API key store used by the gate."""

    async def find_by_key(self, key: str) -> Optional[Any]:
        """Return the record whose key matches exactly, or None.

        Records expose ``id``, ``name``, ``service`` and ``is_active``.
        """
        ...

    async def touch_last_used(self, key_id: str) -> None:
        ...


class CredentialGate:
    """Resolves raw credentials into identities.

    Every failure mode (empty input, unknown key, inactive key, bad token,
    lookup error) resolves to None. Callers cannot tell them apart, which
    keeps key enumeration and deactivation invisible to clients.
    """

    def __init__(self, api_keys: ApiKeyRepository, jwt_manager: JWTManager, log=None):
        self.api_keys = api_keys
        self.jwt_manager = jwt_manager
        self.logger = log or logger
        self._background: set[asyncio.Task] = set()

    async def resolve_service_identity(self, raw_key: Optional[str]) -> Optional[ServiceIdentity]:
        if not raw_key:
            return None

        try:
            record = await self.api_keys.find_by_key(raw_key)
        except Exception as e:
            self.logger.error("API key lookup failed", error=str(e))
            return None

        if record is None or not record.is_active:
            return None

        self._schedule_touch(record.id)
        return ServiceIdentity(service=record.service, key_id=record.id, key_name=record.name)

    def resolve_user_identity(self, raw_token: Optional[str]) -> Optional[UserIdentity]:
        if not raw_token:
            return None

        try:
            claims = self.jwt_manager.validate_token(raw_token)
        except jwt.InvalidTokenError as e:
            self.logger.debug("Rejected session token", reason=str(e))
            return None

        return UserIdentity(user_id=str(claims["sub"]), username=claims["username"])

    def _schedule_touch(self, key_id: str) -> None:
        task = asyncio.create_task(self._touch_last_used(key_id))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _touch_last_used(self, key_id: str) -> None:
        try:
            await self.api_keys.touch_last_used(key_id)
        except Exception as e:
            self.logger.warning("Failed to update API key last-used time", key_id=key_id, error=str(e))

    @property
    def pending_tasks(self) -> int:
        return len(self._background)

    async def drain(self) -> None:
        """Wait for outstanding last-used updates to finish."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
