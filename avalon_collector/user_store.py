# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Persistence of administrator accounts."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from starlette.concurrency import run_in_threadpool

from avalon_storage import DocumentNotFoundError, DocumentStore, DocumentStoreError

from .errors import NotFound, StoreFailure

COLLECTION = "users"


@dataclass(frozen=True)
class UserRecord:
    id: str
    username: str
    password_hash: str
    created_at: datetime
    updated_at: datetime

    def public_dict(self) -> Dict[str, Any]:
        """The only view of a user that leaves the service."""
        return {"id": self.id, "username": self.username}

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "UserRecord":
        return cls(
            id=str(doc["_id"]),
            username=doc["username"],
            password_hash=doc["password"],
            created_at=doc["createdAt"],
            updated_at=doc.get("updatedAt") or doc["createdAt"],
        )


class UserStore:
    def __init__(self, document_store: DocumentStore):
        self.document_store = document_store

    async def _call(self, failure: str, func, *args, **kwargs):
        try:
            return await run_in_threadpool(func, *args, **kwargs)
        except DocumentNotFoundError:
            raise NotFound("User not found") from None
        except DocumentStoreError as e:
            raise StoreFailure(failure) from e

    async def create(self, username: str, password_hash: str) -> UserRecord:
        now = datetime.now(timezone.utc)
        doc = {
            "_id": str(uuid.uuid4()),
            "username": username,
            "password": password_hash,
            "createdAt": now,
            "updatedAt": now,
        }
        await self._call("Failed to create user", self.document_store.insert_document, COLLECTION, doc)
        return UserRecord.from_document(doc)

    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        docs = await self._call(
            "Failed to look up user",
            self.document_store.query_documents, COLLECTION, {"username": username}, limit=1,
        )
        return UserRecord.from_document(docs[0]) if docs else None

    async def find(self, user_id: str) -> Optional[UserRecord]:
        doc = await self._call("Failed to read user", self.document_store.get_document, COLLECTION, user_id)
        return UserRecord.from_document(doc) if doc else None

    async def update(self, user_id: str, **fields: Any) -> UserRecord:
        patch = dict(fields)
        patch["updatedAt"] = datetime.now(timezone.utc)
        await self._call("Failed to update user", self.document_store.update_document, COLLECTION, user_id, patch)
        user = await self.find(user_id)
        if user is None:
            raise NotFound("User not found")
        return user
