# -*- coding: utf-8 -*-
"""
Financial Projector

Projects a strategy bundle's cash flows over a multi-year horizon and
phases its emission reductions in over time.

Cash flow model:
    - Year 0: -capex
    - Years 1..horizon: +annual savings
    - Discounted cash flow = cash_flow / (1 + rate) ** year
    - Cumulative NPV is the running sum of discounted cash flows

Emissions phasing by implementation timeframe:
    - up to 1 year: 100% in year 1
    - up to 3 years: 30% / 50% / 20%
    - longer: 10% / 20% / 30% / 25% / 15%

Example:
    >>> projector = FinancialProjector()
    >>> projection = projector.project(100000, 30000, horizon_years=5,
    ...                                discount_rate=0.0)
    >>> projection.rows[-1].cumulative_cash_flow
    50000.0
"""

from __future__ import annotations

import logging
import math
import re
import time
from typing import List, Optional, Tuple

from carbonprospect.exceptions import (
    InvalidDiscountRate,
    InvalidProjectionHorizon,
    ValidationError,
)
from carbonprospect.footprint.config import FootprintConfig, get_config
from carbonprospect.footprint.metrics import record_operation
from carbonprospect.footprint.models import (
    EmissionsTrajectory,
    FinancialProjection,
    ProjectionRow,
    StrategyEvaluationReport,
    TrajectoryRow,
)

logger = logging.getLogger(__name__)

SHORT_TERM_SCHEDULE: Tuple[float, ...] = (1.0,)
MEDIUM_TERM_SCHEDULE: Tuple[float, ...] = (0.3, 0.5, 0.2)
LONG_TERM_SCHEDULE: Tuple[float, ...] = (0.1, 0.2, 0.3, 0.25, 0.15)

_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def realization_schedule(timeframe_label: str) -> Tuple[float, ...]:
    """Yearly share of a strategy's reduction realized, by timeframe label.

    The upper bound of the label decides the schedule: "6 months" and
    "1 year" are short term, "1-3 years" medium, "2-5 years" long.
    Labels without a number are treated as medium term.
    """
    numbers = [float(n) for n in _NUMBER.findall(timeframe_label or "")]
    if not numbers:
        return MEDIUM_TERM_SCHEDULE
    upper = max(numbers)
    if "month" in timeframe_label.lower():
        upper /= 12.0
    if upper <= 1:
        return SHORT_TERM_SCHEDULE
    if upper <= 3:
        return MEDIUM_TERM_SCHEDULE
    return LONG_TERM_SCHEDULE


class FinancialProjector:
    """Discounted cash flow and emissions trajectory projections.

    Attributes:
        config: Supplies the default horizon, discount rate and the
            maximum accepted horizon.
    """

    def __init__(self, config: Optional[FootprintConfig] = None) -> None:
        self.config = config or get_config()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _check_horizon(self, horizon_years: Optional[int]) -> int:
        horizon = self.config.default_horizon_years if horizon_years is None else horizon_years
        if (
            isinstance(horizon, bool)
            or not isinstance(horizon, int)
            or not 1 <= horizon <= self.config.max_horizon_years
        ):
            raise InvalidProjectionHorizon(horizon, self.config.max_horizon_years)
        return horizon

    def _check_rate(self, discount_rate: Optional[float]) -> float:
        rate = self.config.default_discount_rate if discount_rate is None else discount_rate
        try:
            value = float(rate)
        except (TypeError, ValueError) as exc:
            raise InvalidDiscountRate(rate) from exc
        if math.isnan(value) or math.isinf(value) or value < 0:
            raise InvalidDiscountRate(rate)
        return value

    # ------------------------------------------------------------------
    # Cash flows
    # ------------------------------------------------------------------

    def project(
        self,
        bundle_capex_total: float,
        bundle_annual_savings_total: float,
        horizon_years: Optional[int] = None,
        discount_rate: Optional[float] = None,
    ) -> FinancialProjection:
        """Project cash flows for years 0..horizon.

        Args:
            bundle_capex_total: Up-front capital spent in year 0.
            bundle_annual_savings_total: Savings received in each later year.
            horizon_years: Number of savings years (config default if None).
            discount_rate: Annual discount rate, e.g. 0.05 (config default
                if None).

        Returns:
            FinancialProjection with one row per year.

        Raises:
            InvalidDiscountRate: If the rate is negative or not a number.
            InvalidProjectionHorizon: If the horizon is outside
                1..max_horizon_years.
            ValidationError: If the capex is negative.
        """
        start = time.monotonic()
        horizon = self._check_horizon(horizon_years)
        rate = self._check_rate(discount_rate)
        if bundle_capex_total < 0:
            raise ValidationError(
                "Bundle capex must be non-negative",
                component="FinancialProjector",
                invalid_fields={"bundle_capex_total": repr(bundle_capex_total)},
            )

        rows: List[ProjectionRow] = []
        cumulative = 0.0
        cumulative_npv = 0.0
        payback_year: Optional[int] = None
        discounted_payback_year: Optional[int] = None

        for year in range(horizon + 1):
            net = -bundle_capex_total if year == 0 else bundle_annual_savings_total
            discounted = net / (1.0 + rate) ** year
            cumulative += net
            cumulative_npv += discounted
            if payback_year is None and cumulative >= 0:
                payback_year = year
            if discounted_payback_year is None and cumulative_npv >= 0:
                discounted_payback_year = year
            rows.append(ProjectionRow(
                year=year,
                net_cash_flow=net,
                cumulative_cash_flow=cumulative,
                discounted_cash_flow=discounted,
                cumulative_npv=cumulative_npv,
            ))

        projection = FinancialProjection(
            horizon_years=horizon,
            discount_rate=rate,
            capex=bundle_capex_total,
            annual_savings=bundle_annual_savings_total,
            rows=rows,
            npv=cumulative_npv,
            payback_year=payback_year,
            discounted_payback_year=discounted_payback_year,
        )
        record_operation("project", "success", time.monotonic() - start)
        return projection

    def project_bundle(
        self,
        report: StrategyEvaluationReport,
        horizon_years: Optional[int] = None,
        discount_rate: Optional[float] = None,
    ) -> FinancialProjection:
        """Project the totals of an evaluated strategy bundle."""
        return self.project(
            report.total_capex,
            report.total_annual_savings,
            horizon_years=horizon_years,
            discount_rate=discount_rate,
        )

    # ------------------------------------------------------------------
    # Emissions
    # ------------------------------------------------------------------

    def project_emissions(
        self,
        baseline_emissions: float,
        report: StrategyEvaluationReport,
        horizon_years: Optional[int] = None,
    ) -> EmissionsTrajectory:
        """Phase the bundle's reductions in and draw the target line.

        The target line falls linearly from the baseline in year 0 to
        ``baseline * (1 - target%)`` in the final year.

        Args:
            baseline_emissions: Grand total of the baseline inventory.
            report: Evaluated strategy bundle.
            horizon_years: Years to project (config default if None).

        Returns:
            EmissionsTrajectory with rows for years 0..horizon.
        """
        horizon = self._check_horizon(horizon_years)
        target_fraction = report.reduction_target_percent / 100.0
        final_target = baseline_emissions * (1.0 - target_fraction)

        schedules = [
            (evaluation.reduction_potential,
             realization_schedule(evaluation.timeframe_label))
            for evaluation in report.evaluations
        ]

        rows: List[TrajectoryRow] = []
        target_reached_year: Optional[int] = None
        for year in range(horizon + 1):
            realized = sum(
                potential * sum(schedule[:year]) for potential, schedule in schedules
            )
            projected = max(baseline_emissions - realized, 0.0)
            if target_reached_year is None and projected <= final_target:
                target_reached_year = year
            rows.append(TrajectoryRow(
                year=year,
                baseline_emissions=baseline_emissions,
                projected_emissions=projected,
                target_emissions=baseline_emissions * (1.0 - target_fraction * year / horizon),
                realized_reduction=realized,
            ))

        return EmissionsTrajectory(
            baseline_emissions=baseline_emissions,
            reduction_target_percent=report.reduction_target_percent,
            rows=rows,
            target_reached_year=target_reached_year,
        )


__all__ = [
    "FinancialProjector",
    "realization_schedule",
    "SHORT_TERM_SCHEDULE",
    "MEDIUM_TERM_SCHEDULE",
    "LONG_TERM_SCHEDULE",
]
