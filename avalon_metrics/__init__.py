# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Avalon Metrics Adapter.

Pluggable metrics collection. The collector records counters and gauges
through the abstract ``MetricsCollector``; production deployments use the
Prometheus driver (scraped at ``/metrics``), tests use the in-memory no-op
driver.
"""

__version__ = "0.1.0"

from .base import MetricsCollector
from .factory import create_metrics_collector
from .noop_metrics import NoOpMetricsCollector
from .prometheus_metrics import PrometheusMetricsCollector

__all__ = [
    "__version__",
    "MetricsCollector",
    "NoOpMetricsCollector",
    "PrometheusMetricsCollector",
    "create_metrics_collector",
]
