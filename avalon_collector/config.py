# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Collector configuration loading."""

from typing import Mapping, Optional

from avalon_config import ConfigValidationError, TypedConfig, load_typed_config

from . import SERVICE_NAME


def load_collector_config(environ: Optional[Mapping[str, str]] = None) -> TypedConfig:
    """Load the collector configuration and check cross-field constraints.

    Args:
        environ: Mapping to read from instead of ``os.environ`` (used by tests)

    Raises:
        ConfigValidationError: If a value is missing, malformed or inconsistent
    """
    config = load_typed_config(SERVICE_NAME, environ=environ)

    problems = []
    if config.max_errors_per_page < 1:
        problems.append("max_errors_per_page must be at least 1")
    if not 1 <= config.default_errors_per_page <= config.max_errors_per_page:
        problems.append("default_errors_per_page must be between 1 and max_errors_per_page")
    if config.max_body_bytes < 1:
        problems.append("max_body_bytes must be positive")
    if config.jwt_expiry_seconds < 1:
        problems.append("jwt_expiry_seconds must be positive")

    if problems:
        raise ConfigValidationError(
            f"Configuration validation failed for {SERVICE_NAME}:\n" +
            "\n".join(f"  - {problem}" for problem in problems)
        )
    return config
