# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Avalon Configuration Adapter.

Schema-driven configuration for the collector. Each service ships a JSON
schema describing its fields, their types, defaults and the environment
variables they are read from. Loading validates the values and returns an
immutable, attribute-only configuration object.

Example:
    >>> from avalon_config import load_typed_config
    >>> config = load_typed_config("collector")
    >>> config.http_port
    4000
"""

__version__ = "0.1.0"

from .base import ConfigProvider
from .env_provider import EnvConfigProvider
from .schema_loader import (
    ConfigSchema,
    ConfigSchemaError,
    ConfigValidationError,
    FieldSpec,
    SchemaConfigLoader,
)
from .typed_config import TypedConfig, load_typed_config

__all__ = [
    "__version__",
    "ConfigProvider",
    "EnvConfigProvider",
    "ConfigSchema",
    "ConfigSchemaError",
    "ConfigValidationError",
    "FieldSpec",
    "SchemaConfigLoader",
    "TypedConfig",
    "load_typed_config",
]
