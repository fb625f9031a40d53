# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Factory functions for creating metrics collectors."""

import os

from .base import MetricsCollector
from .noop_metrics import NoOpMetricsCollector
from .prometheus_metrics import PrometheusMetricsCollector


def create_metrics_collector(metrics_type: str | None = None, **kwargs) -> MetricsCollector:
    """Create a metrics collector based on driver type.

    Supported drivers:
    - "prometheus": Prometheus metrics exposed for scraping
    - "noop": In-memory collector for testing and local development

    Args:
        metrics_type: Driver name. Defaults to METRICS_TYPE env or "noop".
        **kwargs: Passed to the driver constructor

    Returns:
        MetricsCollector instance

    Raises:
        ValueError: If metrics_type is not recognized
    """
    metrics_type = (metrics_type or os.getenv("METRICS_TYPE") or "noop").lower()

    if metrics_type == "prometheus":
        return PrometheusMetricsCollector(**kwargs)
    elif metrics_type == "noop":
        return NoOpMetricsCollector(**kwargs)
    else:
        raise ValueError(
            f"Unknown metrics_type: {metrics_type}. "
            f"Must be one of: prometheus, noop"
        )
