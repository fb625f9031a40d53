# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Avalon Error Collector.

Receives error reports from applications, stores them, forwards them to a
Discord webhook and pushes them to live dashboards over a WebSocket.
"""

__version__ = "0.1.0"

SERVICE_NAME = "collector"
