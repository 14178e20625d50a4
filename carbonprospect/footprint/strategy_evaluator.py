# -*- coding: utf-8 -*-
"""
Strategy Evaluator

Evaluates a bundle of selected reduction strategies against an emissions
inventory and a percentage reduction target.

Per strategy:
    - ROI % = annual_opex_savings / capex * 100 ("not_applicable" when capex = 0)
    - Payback years = capex / annual_opex_savings ("not_applicable" when
      savings <= 0)

Per bundle:
    - Cumulative reduction = sum of the selected reduction potentials
    - Target met iff cumulative reduction >= target% of the grand total
    - Strategies ranked by reduction potential (desc), capex (asc), id

Example:
    >>> evaluator = StrategyEvaluator(StrategyCatalog.default())
    >>> report = evaluator.evaluate(
    ...     "office", ["remote-work-policy"], inventory, 20.0,
    ... )
    >>> report.target_met
"""

from __future__ import annotations

import logging
import math
import time
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from carbonprospect.exceptions import ValidationError
from carbonprospect.footprint.metrics import record_operation
from carbonprospect.footprint.models import (
    NOT_APPLICABLE,
    EmissionsInventory,
    ReductionStrategy,
    StrategyEvaluation,
    StrategyEvaluationReport,
)
from carbonprospect.footprint.strategy_catalog import StrategyCatalog

logger = logging.getLogger(__name__)


def roi_percent(capex: float, annual_savings: float) -> Union[float, str]:
    """Simple annual return on investment in percent."""
    if capex == 0:
        return NOT_APPLICABLE
    return annual_savings / capex * 100.0


def payback_years(capex: float, annual_savings: float) -> Union[float, str]:
    """Years of savings needed to recover the capex."""
    if annual_savings <= 0:
        return NOT_APPLICABLE
    return capex / annual_savings


def validate_target_percent(value: Any) -> float:
    """Check that a reduction target lies within 0..100 percent.

    Raises:
        ValidationError: If it does not.
    """
    if (
        isinstance(value, bool)
        or not isinstance(value, Real)
        or math.isnan(value)
        or not 0 <= value <= 100
    ):
        raise ValidationError(
            "Reduction target must be between 0 and 100 percent",
            component="StrategyEvaluator",
            invalid_fields={"reduction_target_percent": repr(value)},
        )
    return float(value)


class StrategyEvaluator:
    """Ranks selected strategies and checks them against a target.

    Attributes:
        catalog: Strategy catalog used to resolve selections.
    """

    def __init__(self, catalog: StrategyCatalog) -> None:
        self.catalog = catalog

    def evaluate(
        self,
        industry: str,
        selected_ids: Sequence[str],
        inventory: EmissionsInventory,
        reduction_target_percent: float,
        potential_overrides: Optional[Mapping[str, float]] = None,
    ) -> StrategyEvaluationReport:
        """Evaluate a strategy selection.

        Args:
            industry: Industry the selections must belong to.
            selected_ids: Strategy ids in selection order. Repeats are
                evaluated once and reported in ``warnings``.
            inventory: Baseline emissions inventory.
            reduction_target_percent: Target as a percent of the grand total.
            potential_overrides: Organization-specific absolute reduction
                potentials (kgCO2e/yr) replacing catalog values.

        Returns:
            StrategyEvaluationReport with ranked evaluations.

        Raises:
            StrategyNotFound: If an id is unknown or from another industry.
            ValidationError: If the target or an override is out of range.
        """
        start = time.monotonic()
        target = validate_target_percent(reduction_target_percent)
        overrides = dict(potential_overrides or {})
        warnings: List[str] = []

        unique_ids: List[str] = []
        for strategy_id in selected_ids:
            if strategy_id in unique_ids:
                warnings.append(f"Strategy '{strategy_id}' selected more than once")
                continue
            unique_ids.append(strategy_id)

        for strategy_id in overrides:
            if strategy_id not in unique_ids:
                warnings.append(
                    f"Override for unselected strategy '{strategy_id}' ignored"
                )

        selected: List[tuple] = []
        for strategy_id in unique_ids:
            strategy = self.catalog.get(strategy_id, industry)
            potential = self._potential(strategy, overrides)
            selected.append((strategy, potential))

        selected.sort(key=lambda item: (-item[1], item[0].capex, item[0].strategy_id))

        evaluations: List[StrategyEvaluation] = []
        cumulative = 0.0
        by_scope: Dict[int, float] = {1: 0.0, 2: 0.0, 3: 0.0}
        for rank, (strategy, potential) in enumerate(selected, start=1):
            cumulative += potential
            by_scope[strategy.scope] += potential
            evaluations.append(StrategyEvaluation(
                strategy_id=strategy.strategy_id,
                name=strategy.name,
                scope=strategy.scope,
                timeframe_label=strategy.timeframe_label,
                capex=strategy.capex,
                annual_opex_savings=strategy.annual_opex_savings,
                reduction_potential=potential,
                roi_percent=roi_percent(strategy.capex, strategy.annual_opex_savings),
                payback_years=payback_years(strategy.capex, strategy.annual_opex_savings),
                cumulative_reduction=cumulative,
                rank=rank,
            ))

        total_capex = sum(e.capex for e in evaluations)
        total_savings = sum(e.annual_opex_savings for e in evaluations)
        target_reduction = target / 100.0 * inventory.grand_total

        report = StrategyEvaluationReport(
            industry=industry.lower(),
            evaluations=evaluations,
            total_capex=total_capex,
            total_annual_savings=total_savings,
            cumulative_reduction=cumulative,
            reduction_target_percent=target,
            target_reduction=target_reduction,
            target_met=cumulative >= target_reduction,
            bundle_roi_percent=roi_percent(total_capex, total_savings),
            bundle_payback_years=payback_years(total_capex, total_savings),
            reductions_by_scope=by_scope,
            reduction_percent_of_total=(
                cumulative / inventory.grand_total * 100.0
                if inventory.grand_total > 0 else NOT_APPLICABLE
            ),
            warnings=warnings,
        )

        for warning in warnings:
            logger.warning("Strategy evaluation: %s", warning)
        record_operation("evaluate", "success", time.monotonic() - start)
        return report

    @staticmethod
    def _potential(strategy: ReductionStrategy, overrides: Mapping[str, float]) -> float:
        if strategy.strategy_id not in overrides:
            return strategy.reduction_potential
        value = overrides[strategy.strategy_id]
        if (
            isinstance(value, bool)
            or not isinstance(value, Real)
            or not math.isfinite(value)
            or value < 0
        ):
            raise ValidationError(
                f"Reduction potential override for '{strategy.strategy_id}' "
                "must be a finite, non-negative number",
                component="StrategyEvaluator",
                invalid_fields={strategy.strategy_id: repr(value)},
            )
        return float(value)


__all__ = [
    "StrategyEvaluator",
    "roi_percent",
    "payback_years",
    "validate_target_percent",
]
