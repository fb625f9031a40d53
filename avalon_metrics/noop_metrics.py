# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""No-op metrics collector for testing and local development."""

import logging
from typing import Dict, List, Optional, Tuple

from .base import MetricsCollector

logger = logging.getLogger(__name__)


class NoOpMetricsCollector(MetricsCollector):
    """Metrics collector that keeps every call in memory.

    Nothing is exported; tests inspect the recorded values.
    """

    def __init__(self, **kwargs):
        self.counters: List[Tuple[str, float, Optional[Dict[str, str]]]] = []
        self.observations: List[Tuple[str, float, Optional[Dict[str, str]]]] = []
        self.gauges: List[Tuple[str, float, Optional[Dict[str, str]]]] = []

    def increment(self, name: str, value: float = 1.0, tags: Optional[Dict[str, str]] = None) -> None:
        self.counters.append((name, value, tags))
        logger.debug(f"NoOpMetricsCollector: increment {name} by {value} with tags {tags}")

    def observe(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        self.observations.append((name, value, tags))
        logger.debug(f"NoOpMetricsCollector: observe {name} value {value} with tags {tags}")

    def gauge(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        self.gauges.append((name, value, tags))
        logger.debug(f"NoOpMetricsCollector: gauge {name} set to {value} with tags {tags}")

    def clear_metrics(self) -> None:
        """Clear all stored metrics."""
        self.counters.clear()
        self.observations.clear()
        self.gauges.clear()

    def get_counter_total(self, name: str, tags: Optional[Dict[str, str]] = None) -> float:
        """Get total value of a counter metric.

        Args:
            name: Name of the counter metric
            tags: Optional tags to filter by (if None, sums all matching names)

        Returns:
            Total counter value
        """
        total = 0.0
        for counter_name, value, counter_tags in self.counters:
            if counter_name == name:
                if tags is None or counter_tags == tags:
                    total += value
        return total

    def get_gauge_value(self, name: str, tags: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Get the most recent value of a gauge metric, or None if never set."""
        matching_gauges = [
            value for gauge_name, value, gauge_tags in self.gauges
            if gauge_name == name and (tags is None or gauge_tags == tags)
        ]
        return matching_gauges[-1] if matching_gauges else None
