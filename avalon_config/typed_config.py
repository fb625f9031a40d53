# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Typed configuration wrapper for services."""

import os
from typing import Any, Dict, Mapping, Optional

from .env_provider import EnvConfigProvider
from .schema_loader import ConfigSchema, SchemaConfigLoader

DEFAULT_SCHEMA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "schemas")


class TypedConfig:
    """Typed configuration wrapper that provides attribute-only access to config values.

    Dictionary-style access is intentionally NOT supported so that every
    accessed key is visible to static analysis and must exist in the schema.

    Example:
        >>> config = load_typed_config("collector")
        >>> config.http_port
        4000
        >>> config["http_port"]
        TypeError: TypedConfig does not support dict-style access
    """

    def __init__(self, config_dict: Dict[str, Any], schema_version: Optional[str] = None):
        object.__setattr__(self, '_config', dict(config_dict))
        object.__setattr__(self, '_schema_version', schema_version)

    def get_schema_version(self) -> Optional[str]:
        return object.__getattribute__(self, '_schema_version')

    def __getattr__(self, name: str) -> Any:
        """Get configuration value by attribute name only.

        Raises:
            AttributeError: If configuration key does not exist
        """
        if name.startswith('_'):
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

        config = object.__getattribute__(self, '_config')
        if name not in config:
            raise AttributeError(
                f"Configuration key '{name}' not found. "
                f"Available keys: {sorted(config.keys())}"
            )

        return config[name]

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(
            f"Cannot modify configuration. '{name}' is read-only. "
            "Configuration is immutable after loading."
        )

    def __getitem__(self, key: str) -> Any:
        raise TypeError(
            f"TypedConfig does not support dict-style access (config['{key}']). "
            f"Use attribute-style instead: config.{key}"
        )

    def replace(self, **overrides: Any) -> "TypedConfig":
        """Return a copy with some values replaced.

        Only keys that already exist may be overridden.

        Raises:
            AttributeError: If an override names an unknown key
        """
        config = dict(object.__getattribute__(self, '_config'))
        for key, value in overrides.items():
            if key not in config:
                raise AttributeError(f"Configuration key '{key}' not found")
            config[key] = value
        return TypedConfig(config, self.get_schema_version())

    def __repr__(self) -> str:
        config = object.__getattribute__(self, '_config')
        return f"TypedConfig({config!r})"

    def __dir__(self) -> list:
        config = object.__getattribute__(self, '_config')
        return sorted(config.keys())


def load_typed_config(
    service_name: str,
    schema_dir: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> TypedConfig:
    """Load and validate configuration, returning a typed config object.

    Args:
        service_name: Name of the service; selects ``<schema_dir>/<service_name>.json``
        schema_dir: Directory containing schema files (defaults to the bundled schemas)
        environ: Mapping to read values from (defaults to ``os.environ``)

    Returns:
        TypedConfig instance with validated configuration

    Raises:
        ConfigSchemaError: If schema is missing or invalid
        ConfigValidationError: If configuration validation fails
    """
    schema_path = os.path.join(schema_dir or DEFAULT_SCHEMA_DIR, f"{service_name}.json")
    schema = ConfigSchema.from_json_file(schema_path)
    loader = SchemaConfigLoader(schema, env_provider=EnvConfigProvider(environ))
    return TypedConfig(loader.load(), schema.schema_version)
