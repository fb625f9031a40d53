# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Abstract logger interface."""

from abc import ABC, abstractmethod
from typing import Any


class Logger(ABC):
    """Abstract base class for loggers.

    Every method takes a message plus arbitrary keyword fields that are
    emitted as structured data alongside it.
    """

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error-level message with the active exception attached.

        Intended to be called from inside an ``except`` block.
        """
        pass
