# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Environment-backed configuration provider."""

import os
from typing import Any, Mapping, Optional

from .base import ConfigProvider

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


class EnvConfigProvider(ConfigProvider):
    """Configuration provider that reads from environment variables.

    Typed getters raise ``ValueError`` for values that cannot be converted,
    so a typo in a deployment surfaces at startup instead of silently
    falling back to a default.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str, default: Any = None) -> Any:
        return self._environ.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._environ.get(key)
        if value is None or value.strip() == "":
            return default

        value_lower = value.strip().lower()
        if value_lower in _TRUE_VALUES:
            return True
        if value_lower in _FALSE_VALUES:
            return False
        raise ValueError(f"{key}={value!r} is not a boolean")

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._environ.get(key)
        if value is None or value.strip() == "":
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key}={value!r} is not an integer") from None

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self._environ.get(key)
        if value is None or value.strip() == "":
            return default
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"{key}={value!r} is not a number") from None
