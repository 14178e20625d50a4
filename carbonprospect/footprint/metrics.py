# -*- coding: utf-8 -*-
"""
Prometheus Metrics - Footprint Engine

Metrics:
    1. cp_footprint_operations_total (Counter)
    2. cp_footprint_operation_duration_seconds (Histogram)
    3. cp_footprint_factor_resolutions_total (Counter)
    4. cp_footprint_payload_recoveries_total (Counter)
    5. cp_footprint_comparisons_total (Counter)
    6. cp_footprint_scenarios (Gauge)

Example:
    >>> from carbonprospect.footprint.metrics import record_operation
    >>> record_operation("aggregate", "success", 0.002)
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Gauge, Histogram

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

footprint_operations_total = Counter(
    "cp_footprint_operations_total",
    "Total footprint engine operations performed",
    labelnames=["operation", "result"],
)

footprint_operation_duration_seconds = Histogram(
    "cp_footprint_operation_duration_seconds",
    "Footprint engine operation duration in seconds",
    labelnames=["operation"],
    buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
)

footprint_factor_resolutions_total = Counter(
    "cp_footprint_factor_resolutions_total",
    "Emission factor resolutions by where the factor was found",
    labelnames=["source"],
)

footprint_payload_recoveries_total = Counter(
    "cp_footprint_payload_recoveries_total",
    "Stored scenario payloads or fields discarded while reading",
    labelnames=["kind"],
)

footprint_comparisons_total = Counter(
    "cp_footprint_comparisons_total",
    "Scenario comparisons performed",
    labelnames=["size"],
)

footprint_scenarios = Gauge(
    "cp_footprint_scenarios",
    "Scenarios held by the scenario store",
)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def record_operation(operation: str, result: str, duration: float) -> None:
    """Record an engine operation and its duration.

    Args:
        operation: Operation name (aggregate, evaluate, project, ...).
        result: Outcome (success, error).
        duration: Duration in seconds.
    """
    footprint_operations_total.labels(operation=operation, result=result).inc()
    footprint_operation_duration_seconds.labels(operation=operation).observe(duration)


def record_factor_resolution(source: str) -> None:
    """Record where a factor resolved (jurisdiction, global, missing)."""
    footprint_factor_resolutions_total.labels(source=source).inc()


def record_payload_recovery(kind: str) -> None:
    """Record a discarded payload ('payload') or field ('field')."""
    footprint_payload_recoveries_total.labels(kind=kind).inc()


def record_comparison(size: int) -> None:
    footprint_comparisons_total.labels(size=str(size)).inc()


def update_scenarios_count(count: int) -> None:
    footprint_scenarios.set(count)


__all__ = [
    "footprint_operations_total",
    "footprint_operation_duration_seconds",
    "footprint_factor_resolutions_total",
    "footprint_payload_recoveries_total",
    "footprint_comparisons_total",
    "footprint_scenarios",
    "record_operation",
    "record_factor_resolution",
    "record_payload_recovery",
    "record_comparison",
    "update_scenarios_count",
]
