# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Avalon Logging Adapter.

Structured logging for the collector. Components depend on the abstract
``Logger`` so the backend can be swapped (JSON on stdout in production,
an in-memory recorder in tests).

Example:
    >>> from avalon_logging import create_logger
    >>> logger = create_logger(logger_type="stdout", level="INFO", name="collector")
    >>> logger.info("Service started", version="0.1.0")
"""

__version__ = "0.1.0"

from .factory import create_logger
from .logger import Logger
from .silent_logger import SilentLogger
from .stdout_logger import StdoutLogger
from .uvicorn_config import create_uvicorn_log_config

__all__ = [
    "__version__",
    "Logger",
    "SilentLogger",
    "StdoutLogger",
    "create_logger",
    "create_uvicorn_log_config",
]
