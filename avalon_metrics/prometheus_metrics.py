# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Prometheus metrics collector implementation."""

import logging
from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, Histogram, generate_latest

from .base import MetricsCollector

logger = logging.getLogger(__name__)


class PrometheusMetricsCollector(MetricsCollector):
    """Prometheus metrics collector for production observability.

    All calls for the same metric name must use the same label keys;
    Prometheus rejects a metric whose label set changes.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None, namespace: str = "avalon",
                 raise_on_error: bool = False):
        """Initialize Prometheus metrics collector.

        Args:
            registry: Prometheus registry; a private one is created if None so
                several collectors (one per app instance) never collide
            namespace: Namespace prefix for all metrics
            raise_on_error: If True, raise exceptions on metric errors (useful for testing).
                If False, log errors and continue
        """
        self.registry = registry if registry is not None else CollectorRegistry()
        self.namespace = namespace
        self.raise_on_error = raise_on_error
        self._counters: dict[tuple, Counter] = {}
        self._histograms: dict[tuple, Histogram] = {}
        self._gauges: dict[tuple, Gauge] = {}
        self._metrics_errors_count = 0

    def _get_or_create(self, cache: dict, metric_cls, kind: str, name: str, tags: dict[str, str] | None):
        labelnames = tuple(sorted(tags.keys())) if tags else ()
        cache_key = (name, labelnames)

        if cache_key not in cache:
            cache[cache_key] = metric_cls(
                name=name,
                documentation=f"{kind} metric: {name}",
                labelnames=labelnames,
                namespace=self.namespace,
                registry=self.registry,
            )
        return cache[cache_key]

    def _record(self, action: str, name: str, operation) -> None:
        try:
            operation()
        except Exception as e:
            self._metrics_errors_count += 1
            logger.error(f"Failed to {action} {name}: {e}")
            if self.raise_on_error:
                raise

    def increment(self, name: str, value: float = 1.0, tags: dict[str, str] | None = None) -> None:
        def _inc():
            counter = self._get_or_create(self._counters, Counter, "Counter", name, tags)
            (counter.labels(**tags) if tags else counter).inc(value)

        self._record("increment counter", name, _inc)

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        def _observe():
            histogram = self._get_or_create(self._histograms, Histogram, "Histogram", name, tags)
            (histogram.labels(**tags) if tags else histogram).observe(value)

        self._record("observe histogram", name, _observe)

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        def _set():
            gauge = self._get_or_create(self._gauges, Gauge, "Gauge", name, tags)
            (gauge.labels(**tags) if tags else gauge).set(value)

        self._record("set gauge", name, _set)

    def get_errors_count(self) -> int:
        return self._metrics_errors_count

    def render(self) -> tuple[bytes, str]:
        return generate_latest(self.registry), CONTENT_TYPE_LATEST
