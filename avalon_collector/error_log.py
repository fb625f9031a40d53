# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Append-only JSON-lines log of received error events."""

import json
import os
import threading

from starlette.concurrency import run_in_threadpool

from .models import ErrorEvent


class ErrorFileLogger:
    """Appends one ``{id, service, message, createdAt}`` line per event.

    An empty path disables the log.
    """

    def __init__(self, path: str | None):
        self.path = path or None
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.path is not None

    def _append(self, line: str) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with self._lock:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)

    async def append(self, event: ErrorEvent) -> None:
        """Raises OSError if the file cannot be written."""
        if not self.enabled:
            return
        data = event.to_dict()
        line = json.dumps({
            "id": data["id"],
            "service": data["service"],
            "message": data["message"],
            "createdAt": data["createdAt"],
        }) + "\n"
        await run_in_threadpool(self._append, line)
