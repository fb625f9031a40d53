# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Persistence of the deployment-wide notification settings."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from starlette.concurrency import run_in_threadpool

from avalon_storage import DocumentStore, DocumentStoreError

from .errors import StoreFailure
from .models import isoformat

COLLECTION = "settings"
SETTINGS_ID = "settings"


@dataclass(frozen=True)
class Settings:
    discord_webhook_url: Optional[str]
    discord_enabled: bool
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": SETTINGS_ID,
            "discordWebhookUrl": self.discord_webhook_url,
            "discordEnabled": self.discord_enabled,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Settings":
        return cls(
            discord_webhook_url=doc.get("discordWebhookUrl") or None,
            discord_enabled=bool(doc.get("discordEnabled", False)),
            created_at=doc["createdAt"],
            updated_at=doc.get("updatedAt") or doc["createdAt"],
        )


class SettingsStore:
    """Singleton settings record, created from defaults on first read.

    Nothing is cached: every ``get`` reads the store, so an update is
    visible to the very next webhook attempt.
    """

    def __init__(self, document_store: DocumentStore, default_webhook_url: Optional[str] = None,
                 default_enabled: bool = False):
        self.document_store = document_store
        self.default_webhook_url = default_webhook_url or None
        self.default_enabled = default_enabled

    async def get(self) -> Settings:
        try:
            doc = await run_in_threadpool(self.document_store.get_document, COLLECTION, SETTINGS_ID)
            if doc is None:
                now = datetime.now(timezone.utc)
                doc = {
                    "_id": SETTINGS_ID,
                    "discordWebhookUrl": self.default_webhook_url,
                    "discordEnabled": self.default_enabled,
                    "createdAt": now,
                    "updatedAt": now,
                }
                try:
                    await run_in_threadpool(self.document_store.insert_document, COLLECTION, doc)
                except DocumentStoreError:
                    # Lost a creation race with a concurrent first read
                    existing = await run_in_threadpool(self.document_store.get_document, COLLECTION, SETTINGS_ID)
                    if existing is None:
                        raise
                    doc = existing
        except DocumentStoreError as e:
            raise StoreFailure("Failed to read settings") from e
        return Settings.from_document(doc)

    async def update(self, **fields: Any) -> Settings:
        """Patch the settings record.

        Args:
            **fields: Document fields to change (``discordWebhookUrl``,
                ``discordEnabled``); absent fields keep their value
        """
        await self.get()
        patch = dict(fields)
        patch["updatedAt"] = datetime.now(timezone.utc)
        try:
            await run_in_threadpool(self.document_store.update_document, COLLECTION, SETTINGS_ID, patch)
        except DocumentStoreError as e:
            raise StoreFailure("Failed to update settings") from e
        return await self.get()
