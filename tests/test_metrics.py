"""Tests for Prometheus metric recording."""

from prometheus_client import REGISTRY

from carbonprospect.footprint.metrics import (
    record_comparison,
    record_operation,
    record_payload_recovery,
    update_scenarios_count,
)
from carbonprospect.footprint.payload import decode_payload


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_record_operation_counts_and_times():
    labels = {"operation": "unit_test", "result": "success"}
    before = _sample("cp_footprint_operations_total", labels)
    record_operation("unit_test", "success", 0.01)

    assert _sample("cp_footprint_operations_total", labels) == before + 1
    assert _sample(
        "cp_footprint_operation_duration_seconds_count", {"operation": "unit_test"},
    ) >= 1


def test_comparison_size_label():
    before = _sample("cp_footprint_comparisons_total", {"size": "3"})
    record_comparison(3)
    assert _sample("cp_footprint_comparisons_total", {"size": "3"}) == before + 1


def test_scenario_gauge():
    update_scenarios_count(7)
    assert _sample("cp_footprint_scenarios") == 7


def test_payload_recovery_recorded_on_read():
    before = _sample("cp_footprint_payload_recoveries_total", {"kind": "payload"})
    decode_payload("not json")
    assert _sample("cp_footprint_payload_recoveries_total", {"kind": "payload"}) == before + 1

    before = _sample("cp_footprint_payload_recoveries_total", {"kind": "field"})
    record_payload_recovery("field")
    assert _sample("cp_footprint_payload_recoveries_total", {"kind": "field"}) == before + 1
