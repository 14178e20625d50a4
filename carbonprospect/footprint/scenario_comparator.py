# -*- coding: utf-8 -*-
"""
Scenario Comparator

Side-by-side comparison of 2 or 3 scenarios of a footprint. Each metric
becomes one row with a value per scenario and the delta against the
first scenario. Metrics a scenario lacks are reported as
``"not_available"`` rather than zero.

Example:
    >>> comparator = ScenarioComparator(store)
    >>> table = comparator.compare([baseline_id, ambitious_id])
    >>> table.row("grand_total").deltas
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Sequence, Tuple, Union

from carbonprospect.exceptions import InvalidComparisonSize
from carbonprospect.footprint.metrics import record_comparison, record_operation
from carbonprospect.footprint.models import (
    NOT_AVAILABLE,
    ComparisonRow,
    Scenario,
    ScenarioComparison,
)
from carbonprospect.footprint.scenario_store import ScenarioStore

logger = logging.getLogger(__name__)

MIN_SCENARIOS = 2
MAX_SCENARIOS = 3

Extractor = Callable[[Scenario], Optional[float]]


def _inventory_value(attribute: str) -> Extractor:
    def extract(scenario: Scenario) -> Optional[float]:
        inventory = scenario.data.inventory
        if inventory is None:
            return None
        if attribute == "grand_total":
            return inventory.grand_total
        return getattr(inventory, attribute).total
    return extract


def _payload_value(attribute: str) -> Extractor:
    def extract(scenario: Scenario) -> Optional[float]:
        value = getattr(scenario.data, attribute)
        return None if value is None else float(value)
    return extract


METRICS: List[Tuple[str, str, Extractor]] = [
    ("grand_total", "Total emissions (kgCO2e)", _inventory_value("grand_total")),
    ("scope1_total", "Scope 1 (kgCO2e)", _inventory_value("scope1")),
    ("scope2_total", "Scope 2 (kgCO2e)", _inventory_value("scope2")),
    ("scope3_total", "Scope 3 (kgCO2e)", _inventory_value("scope3")),
    ("employee_count", "Employees", _payload_value("employee_count")),
    ("annual_revenue", "Annual revenue", _payload_value("annual_revenue")),
    ("reduction_target_percent", "Reduction target (%)",
     _payload_value("reduction_target_percent")),
]


class ScenarioComparator:
    """Builds comparison tables from stored scenarios."""

    def __init__(self, store: ScenarioStore) -> None:
        self.store = store

    def compare(self, scenario_ids: Sequence[str]) -> ScenarioComparison:
        """Compare 2 or 3 scenarios.

        Args:
            scenario_ids: Scenario ids; the first is the delta reference.

        Returns:
            ScenarioComparison with one row per metric.

        Raises:
            InvalidComparisonSize: If fewer than 2 or more than 3 ids are
                given. Checked before any scenario is fetched.
            ScenarioNotFound: If an id does not exist.
        """
        ids = list(scenario_ids)
        if not MIN_SCENARIOS <= len(ids) <= MAX_SCENARIOS:
            raise InvalidComparisonSize(len(ids), MIN_SCENARIOS, MAX_SCENARIOS)

        start = time.monotonic()
        scenarios = [self.store.get_scenario(scenario_id) for scenario_id in ids]

        rows: List[ComparisonRow] = []
        for metric, label, extract in METRICS:
            raw = [extract(s) for s in scenarios]
            values: List[Union[float, str]] = [
                NOT_AVAILABLE if v is None else v for v in raw
            ]
            reference = raw[0]
            deltas: List[Union[float, str]] = [
                NOT_AVAILABLE if v is None or reference is None else v - reference
                for v in raw
            ]
            rows.append(ComparisonRow(metric=metric, label=label, values=values, deltas=deltas))

        record_comparison(len(ids))
        record_operation("compare", "success", time.monotonic() - start)
        logger.debug("Compared scenarios %s", ids)
        return ScenarioComparison(
            scenario_ids=ids,
            scenario_names=[s.name for s in scenarios],
            rows=rows,
        )


__all__ = ["ScenarioComparator", "METRICS", "MIN_SCENARIOS", "MAX_SCENARIOS"]
