# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Persistence of service API keys."""

import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from avalon_storage import DocumentNotFoundError, DocumentStore, DocumentStoreError
from avalon_storage.document_store import DESCENDING

from .errors import NotFound, StoreFailure
from .models import isoformat

COLLECTION = "api_keys"
KEY_PREFIX = "avl_"
KEY_HEX_LENGTH = 36


def generate_api_key() -> str:
    """Return a fresh key: ``avl_`` followed by 36 lowercase hex characters."""
    return KEY_PREFIX + secrets.token_hex(KEY_HEX_LENGTH // 2)


@dataclass(frozen=True)
class ApiKeyRecord:
    id: str
    name: str
    key: str
    service: str
    is_active: bool
    created_by_id: Optional[str]
    created_at: datetime
    updated_at: datetime
    last_used_at: Optional[datetime] = None

    def to_dict(self, created_by: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "key": self.key,
            "service": self.service,
            "isActive": self.is_active,
            "lastUsedAt": isoformat(self.last_used_at),
            "createdById": self.created_by_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if created_by is not None:
            data["createdBy"] = created_by
        return data

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ApiKeyRecord":
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            key=doc["key"],
            service=doc["service"],
            is_active=bool(doc.get("isActive", True)),
            created_by_id=doc.get("createdById"),
            created_at=doc["createdAt"],
            updated_at=doc.get("updatedAt") or doc["createdAt"],
            last_used_at=doc.get("lastUsedAt"),
        )


class ApiKeyStore:
    """Document-store backed repository of API keys."""

    def __init__(self, document_store: DocumentStore):
        self.document_store = document_store

    async def _call(self, failure: str, func, *args, **kwargs):
        try:
            return await run_in_threadpool(func, *args, **kwargs)
        except DocumentNotFoundError:
            raise NotFound("API Key not found") from None
        except DocumentStoreError as e:
            raise StoreFailure(failure) from e

    async def create(self, name: str, service: str, created_by_id: Optional[str], key: Optional[str] = None) -> ApiKeyRecord:
        now = datetime.now(timezone.utc)
        doc = {
            "_id": str(uuid.uuid4()),
            "name": name,
            "key": key or generate_api_key(),
            "service": service,
            "isActive": True,
            "lastUsedAt": None,
            "createdById": created_by_id,
            "createdAt": now,
            "updatedAt": now,
        }
        await self._call("Failed to create API key", self.document_store.insert_document, COLLECTION, doc)
        return ApiKeyRecord.from_document(doc)

    async def find_by_key(self, key: str) -> Optional[ApiKeyRecord]:
        docs = await self._call(
            "Failed to look up API key",
            self.document_store.query_documents, COLLECTION, {"key": key}, limit=1,
        )
        return ApiKeyRecord.from_document(docs[0]) if docs else None

    async def get(self, key_id: str) -> ApiKeyRecord:
        doc = await self._call("Failed to read API key", self.document_store.get_document, COLLECTION, key_id)
        if doc is None:
            raise NotFound("API Key not found")
        return ApiKeyRecord.from_document(doc)

    async def list(self) -> List[ApiKeyRecord]:
        """Newest first."""
        docs = await self._call(
            "Failed to list API keys",
            self.document_store.query_documents, COLLECTION, {},
            limit=None, sort_by="createdAt", sort_order=DESCENDING,
        )
        return [ApiKeyRecord.from_document(doc) for doc in docs]

    async def update(self, key_id: str, **fields: Any) -> ApiKeyRecord:
        """Apply a patch of document fields and return the updated record."""
        patch = dict(fields)
        patch["updatedAt"] = datetime.now(timezone.utc)
        await self._call("Failed to update API key", self.document_store.update_document, COLLECTION, key_id, patch)
        return await self.get(key_id)

    async def regenerate(self, key_id: str) -> ApiKeyRecord:
        return await self.update(key_id, key=generate_api_key())

    async def delete(self, key_id: str) -> None:
        await self._call("Failed to delete API key", self.document_store.delete_document, COLLECTION, key_id)

    async def touch_last_used(self, key_id: str) -> None:
        await self._call(
            "Failed to update API key",
            self.document_store.update_document, COLLECTION, key_id,
            {"lastUsedAt": datetime.now(timezone.utc)},
        )
