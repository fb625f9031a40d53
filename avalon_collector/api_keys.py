# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""API key management for administrators."""

from typing import Any, Dict, List, Optional

from .api_key_store import ApiKeyRecord, ApiKeyStore
from .errors import ValidationFailed
from .user_store import UserStore


class ApiKeyService:
    """CRUD over API keys, with each key's creator resolved for display."""

    def __init__(self, api_keys: ApiKeyStore, users: UserStore):
        self.api_keys = api_keys
        self.users = users

    async def _with_creator(self, record: ApiKeyRecord) -> Dict[str, Any]:
        creator = None
        if record.created_by_id:
            user = await self.users.find(record.created_by_id)
            if user is not None:
                creator = user.public_dict()
        return record.to_dict(created_by=creator)

    async def list(self) -> List[Dict[str, Any]]:
        return [await self._with_creator(record) for record in await self.api_keys.list()]

    async def get(self, key_id: str) -> Dict[str, Any]:
        return await self._with_creator(await self.api_keys.get(key_id))

    async def create(self, name: Optional[str], service: Optional[str], created_by_id: str) -> Dict[str, Any]:
        if not name or not service:
            raise ValidationFailed("Name and service are required")
        record = await self.api_keys.create(name=name, service=service, created_by_id=created_by_id)
        return record.to_dict()

    async def update(
        self,
        key_id: str,
        name: Optional[str] = None,
        service: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Dict[str, Any]:
        patch: Dict[str, Any] = {}
        if name:
            patch["name"] = name
        if service:
            patch["service"] = service
        if is_active is not None:
            patch["isActive"] = is_active
        if not patch:
            raise ValidationFailed("No data provided for update")
        record = await self.api_keys.update(key_id, **patch)
        return record.to_dict()

    async def regenerate(self, key_id: str) -> Dict[str, Any]:
        return (await self.api_keys.regenerate(key_id)).to_dict()

    async def delete(self, key_id: str) -> None:
        await self.api_keys.delete(key_id)
