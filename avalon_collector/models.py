# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Error event models and inbound report schemas."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_LEVEL = "error"


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """Render a UTC timestamp as ISO-8601 with millisecond precision and a Z suffix."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ErrorDetails(BaseModel):
    """The ``error`` object of a report."""
    model_config = ConfigDict(extra="ignore")

    message: Optional[str] = None
    stack: Optional[str] = None
    path: Optional[str] = None
    method: Optional[str] = None


class ErrorReport(BaseModel):
    """Body of ``POST /report``.

    ``service`` and ``timestamp`` are accepted for client compatibility but
    never trusted: the service comes from the API key and the timestamp
    from the store.

    ``metadata`` may be any JSON value and is stored as sent.
    """
    model_config = ConfigDict(extra="ignore")

    service: Optional[str] = None
    error: Optional[ErrorDetails] = None
    metadata: Optional[Any] = None
    level: Optional[str] = None
    timestamp: Optional[Any] = None


@dataclass(frozen=True)
class ErrorEventDraft:
    """A normalized report, ready to be persisted."""
    service: str
    level: str
    message: Optional[str] = None
    stack: Optional[str] = None
    path: Optional[str] = None
    method: Optional[str] = None
    metadata: Optional[Any] = None


@dataclass(frozen=True)
class ErrorEvent:
    """A stored error event. Never modified after creation."""
    id: str
    service: str
    level: str
    created_at: datetime
    message: Optional[str] = None
    stack: Optional[str] = None
    path: Optional[str] = None
    method: Optional[str] = None
    metadata: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation shared by HTTP responses and WebSocket frames."""
        return {
            "id": self.id,
            "service": self.service,
            "level": self.level,
            "message": self.message,
            "stack": self.stack,
            "path": self.path,
            "method": self.method,
            "metadata": self.metadata,
            "createdAt": isoformat(self.created_at),
        }

    def to_document(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "service": self.service,
            "level": self.level,
            "message": self.message,
            "stack": self.stack,
            "path": self.path,
            "method": self.method,
            "metadata": self.metadata,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ErrorEvent":
        created_at = doc["createdAt"]
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            id=str(doc["_id"]),
            service=doc["service"],
            level=doc.get("level") or DEFAULT_LEVEL,
            created_at=created_at,
            message=doc.get("message"),
            stack=doc.get("stack"),
            path=doc.get("path"),
            method=doc.get("method"),
            metadata=doc.get("metadata"),
        )
