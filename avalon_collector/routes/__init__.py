# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""HTTP and WebSocket routes of the collector."""

from .api_keys import router as api_keys_router
from .auth import router as auth_router
from .errors import router as errors_router
from .realtime import router as realtime_router
from .samples import router as samples_router
from .settings import router as settings_router

__all__ = [
    "api_keys_router",
    "auth_router",
    "errors_router",
    "realtime_router",
    "samples_router",
    "settings_router",
]
