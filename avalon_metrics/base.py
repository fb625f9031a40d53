# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Base abstraction for metrics collection."""

from abc import ABC, abstractmethod


class MetricsCollector(ABC):
    """Abstract base class for metrics collectors."""

    @abstractmethod
    def increment(self, name: str, value: float = 1.0, tags: dict[str, str] | None = None) -> None:
        """Increment a counter metric.

        Args:
            name: Name of the counter metric
            value: Amount to increment by (default: 1.0)
            tags: Optional dictionary of tags/labels for the metric
        """
        pass

    @abstractmethod
    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        """Observe a value for histogram metrics (durations, sizes)."""
        pass

    @abstractmethod
    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        """Set a gauge metric to a specific value."""
        pass

    def render(self) -> tuple[bytes, str] | None:
        """Render collected metrics for scraping.

        Returns:
            ``(body, content_type)`` for drivers that expose a scrape
            endpoint, or None when the driver has nothing to expose
        """
        return None
