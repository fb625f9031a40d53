# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Schema-driven configuration loader with validation."""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import ConfigProvider
from .env_provider import EnvConfigProvider

SUPPORTED_TYPES = ("string", "int", "bool", "float", "array")


class ConfigValidationError(Exception):
    """Exception raised when configuration validation fails."""
    pass


class ConfigSchemaError(Exception):
    """Exception raised when schema is invalid or missing."""
    pass


@dataclass
class FieldSpec:
    """Specification for a single configuration field."""
    name: str
    field_type: str  # "string", "int", "bool", "float", "array"
    required: bool = False
    default: Any = None
    env_var: Optional[str] = None
    description: Optional[str] = None

    @property
    def key(self) -> str:
        return self.env_var or self.name.upper()


@dataclass
class ConfigSchema:
    """Configuration schema for a service."""
    service_name: str
    fields: Dict[str, FieldSpec] = field(default_factory=dict)
    schema_version: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConfigSchema':
        """Create ConfigSchema from dictionary.

        Args:
            data: Schema data as dictionary

        Returns:
            ConfigSchema instance

        Raises:
            ConfigSchemaError: If a field declares an unsupported type
        """
        fields = {}
        for field_name, field_data in data.get("fields", {}).items():
            field_type = field_data.get("type", "string")
            if field_type not in SUPPORTED_TYPES:
                raise ConfigSchemaError(
                    f"Field '{field_name}' has unsupported type '{field_type}'. "
                    f"Must be one of: {', '.join(SUPPORTED_TYPES)}"
                )
            fields[field_name] = FieldSpec(
                name=field_name,
                field_type=field_type,
                required=field_data.get("required", False),
                default=field_data.get("default"),
                env_var=field_data.get("env_var"),
                description=field_data.get("description"),
            )

        return cls(
            service_name=data.get("service_name", "unknown"),
            fields=fields,
            schema_version=data.get("schema_version"),
        )

    @classmethod
    def from_json_file(cls, filepath: str) -> 'ConfigSchema':
        """Load schema from JSON file.

        Raises:
            ConfigSchemaError: If schema file is invalid or missing
        """
        if not os.path.exists(filepath):
            raise ConfigSchemaError(f"Schema file not found: {filepath}")

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigSchemaError(f"Invalid JSON in schema file {filepath}: {e}") from e
        return cls.from_dict(data)


class SchemaConfigLoader:
    """Loads and validates configuration based on schema."""

    def __init__(self, schema: ConfigSchema, env_provider: Optional[ConfigProvider] = None):
        self.schema = schema
        self.env_provider = env_provider or EnvConfigProvider()

    def load(self) -> Dict[str, Any]:
        """Load and validate configuration based on schema.

        Returns:
            Validated configuration dictionary

        Raises:
            ConfigValidationError: If required fields are missing or a value
                cannot be converted to its declared type
        """
        config = {}
        errors = []

        for field_name, field_spec in self.schema.fields.items():
            try:
                config[field_name] = self._load_field(field_spec)
            except (ConfigValidationError, ValueError) as e:
                errors.append(f"{field_name}: {e}")

        if errors:
            raise ConfigValidationError(
                f"Configuration validation failed for {self.schema.service_name}:\n" +
                "\n".join(f"  - {err}" for err in errors)
            )

        return config

    def _load_field(self, field_spec: FieldSpec) -> Any:
        provider = self.env_provider
        key = field_spec.key

        if field_spec.field_type == "bool":
            value = provider.get_bool(key, field_spec.default if field_spec.default is not None else False)
        elif field_spec.field_type == "int":
            value = provider.get_int(key, field_spec.default)
        elif field_spec.field_type == "float":
            value = provider.get_float(key, field_spec.default)
        elif field_spec.field_type == "array":
            raw_value = provider.get(key)
            value = _split_list(raw_value) if raw_value is not None else list(field_spec.default or [])
        else:
            value = provider.get(key, field_spec.default)
            if value == "" and field_spec.required:
                value = None

        if field_spec.required and value is None:
            raise ConfigValidationError(
                f"Required field '{field_spec.name}' is missing (env: {key})"
            )

        return value


def _split_list(raw_value: str) -> List[str]:
    """Split a comma-separated environment value into a list."""
    return [item.strip() for item in raw_value.split(",") if item.strip()]
