"""Tests for cash flow projection and emissions phasing."""

import pytest
from hypothesis import given, settings, strategies as st

from carbonprospect.exceptions import (
    InvalidDiscountRate,
    InvalidProjectionHorizon,
    ValidationError,
)
from carbonprospect.footprint.config import FootprintConfig
from carbonprospect.footprint.financial_projector import (
    LONG_TERM_SCHEDULE,
    MEDIUM_TERM_SCHEDULE,
    SHORT_TERM_SCHEDULE,
    FinancialProjector,
    realization_schedule,
)
from carbonprospect.footprint.models import EmissionsInventory, ReductionStrategy
from carbonprospect.footprint.strategy_catalog import StrategyCatalog
from carbonprospect.footprint.strategy_evaluator import StrategyEvaluator


@pytest.fixture
def projector(default_config):
    return FinancialProjector(default_config)


def _report(timeframes, target=30.0, potential=1000.0, grand_total=10000.0):
    """Evaluate one strategy per timeframe label against a flat inventory."""
    strategies = [
        ReductionStrategy(
            strategy_id=f"s{i}",
            industry="office",
            scope=2,
            name=f"Strategy {i}",
            timeframe_label=label,
            difficulty="Low",
            capex=100,
            annual_opex_savings=50,
            reduction_potential=potential,
        )
        for i, label in enumerate(timeframes)
    ]
    inventory = EmissionsInventory(grand_total=grand_total)
    return StrategyEvaluator(StrategyCatalog(strategies)).evaluate(
        "office", [s.strategy_id for s in strategies], inventory, target,
    )


class TestProject:

    def test_undiscounted_rows(self, projector):
        projection = projector.project(100000, 30000, horizon_years=5, discount_rate=0)

        assert [r.year for r in projection.rows] == [0, 1, 2, 3, 4, 5]
        assert projection.rows[0].net_cash_flow == -100000
        assert projection.rows[-1].cumulative_cash_flow == pytest.approx(50000)
        assert projection.npv == pytest.approx(50000)
        assert projection.payback_year == 4
        assert projection.discounted_payback_year == 4

    def test_discounting(self, projector):
        projection = projector.project(1000, 500, horizon_years=2, discount_rate=0.1)

        assert projection.rows[1].discounted_cash_flow == pytest.approx(500 / 1.1)
        assert projection.rows[2].discounted_cash_flow == pytest.approx(500 / 1.21)
        assert projection.npv == pytest.approx(-1000 + 500 / 1.1 + 500 / 1.21)
        assert projection.payback_year == 2
        assert projection.discounted_payback_year is None

    def test_zero_capex_pays_back_immediately(self, projector):
        projection = projector.project(0, 100, horizon_years=3, discount_rate=0.05)
        assert projection.payback_year == 0

    def test_never_pays_back(self, projector):
        projection = projector.project(1000, 0, horizon_years=3, discount_rate=0.05)
        assert projection.payback_year is None
        assert projection.npv == pytest.approx(-1000)

    def test_config_defaults(self, projector):
        projection = projector.project(1000, 300)
        assert projection.horizon_years == 5
        assert projection.discount_rate == 0.05

    def test_negative_capex_rejected(self, projector):
        with pytest.raises(ValidationError):
            projector.project(-1, 100, horizon_years=3, discount_rate=0.05)

    @pytest.mark.parametrize("rate", [-0.01, float("nan"), float("inf"), "abc"])
    def test_invalid_rate(self, projector, rate):
        with pytest.raises(InvalidDiscountRate):
            projector.project(1000, 100, horizon_years=3, discount_rate=rate)

    @pytest.mark.parametrize("horizon", [0, -1, 51, 2.5, True])
    def test_invalid_horizon(self, projector, horizon):
        with pytest.raises(InvalidProjectionHorizon):
            projector.project(1000, 100, horizon_years=horizon, discount_rate=0.05)

    def test_max_horizon_from_config(self):
        projector = FinancialProjector(FootprintConfig(max_horizon_years=10))
        assert len(projector.project(1, 1, horizon_years=10, discount_rate=0).rows) == 11
        with pytest.raises(InvalidProjectionHorizon):
            projector.project(1, 1, horizon_years=11, discount_rate=0)

    def test_project_bundle(self, projector):
        report = _report(["1 year", "2 years"])
        projection = projector.project_bundle(report, horizon_years=3, discount_rate=0)
        assert projection.capex == 200
        assert projection.annual_savings == 100
        assert projection.rows[-1].cumulative_cash_flow == pytest.approx(100)


@pytest.mark.property
class TestProjectionProperties:

    @settings(max_examples=80, deadline=None)
    @given(
        capex=st.integers(min_value=0, max_value=10_000_000),
        savings=st.integers(min_value=-1_000_000, max_value=10_000_000),
        horizon=st.integers(min_value=1, max_value=50),
    )
    def test_zero_rate_cumulative(self, capex, savings, horizon):
        projection = FinancialProjector(FootprintConfig()).project(
            capex, savings, horizon_years=horizon, discount_rate=0,
        )
        final = projection.rows[-1]
        assert final.cumulative_cash_flow == pytest.approx(-capex + savings * horizon)
        assert final.cumulative_npv == pytest.approx(final.cumulative_cash_flow)
        assert len(projection.rows) == horizon + 1

    @settings(max_examples=50, deadline=None)
    @given(
        capex=st.integers(min_value=1, max_value=1_000_000),
        savings=st.integers(min_value=1, max_value=1_000_000),
        rate=st.floats(min_value=0.001, max_value=0.5),
    )
    def test_discounting_never_increases_value(self, capex, savings, rate):
        projection = FinancialProjector(FootprintConfig()).project(
            capex, savings, horizon_years=10, discount_rate=rate,
        )
        for row in projection.rows[1:]:
            assert row.discounted_cash_flow <= row.net_cash_flow


class TestRealizationSchedule:

    @pytest.mark.parametrize("label,expected", [
        ("6 months", SHORT_TERM_SCHEDULE),
        ("1 year", SHORT_TERM_SCHEDULE),
        ("12 months", SHORT_TERM_SCHEDULE),
        ("1-3 years", MEDIUM_TERM_SCHEDULE),
        ("18 months", MEDIUM_TERM_SCHEDULE),
        ("2-5 years", LONG_TERM_SCHEDULE),
        ("5+ years", LONG_TERM_SCHEDULE),
        ("ongoing", MEDIUM_TERM_SCHEDULE),
        ("", MEDIUM_TERM_SCHEDULE),
    ])
    def test_label_mapping(self, label, expected):
        assert realization_schedule(label) == expected

    @pytest.mark.parametrize("schedule", [
        SHORT_TERM_SCHEDULE, MEDIUM_TERM_SCHEDULE, LONG_TERM_SCHEDULE,
    ])
    def test_schedules_sum_to_one(self, schedule):
        assert sum(schedule) == pytest.approx(1.0)


class TestProjectEmissions:

    def test_short_term_strategy_realized_in_year_one(self, projector):
        report = _report(["1 year"], target=5.0)
        trajectory = projector.project_emissions(10000, report, horizon_years=3)

        assert [r.realized_reduction for r in trajectory.rows] == [0, 1000, 1000, 1000]
        assert trajectory.rows[1].projected_emissions == pytest.approx(9000)
        assert trajectory.target_reached_year == 1

    def test_medium_term_phasing(self, projector):
        report = _report(["1-3 years"])
        trajectory = projector.project_emissions(10000, report, horizon_years=5)

        realized = [r.realized_reduction for r in trajectory.rows]
        assert realized == pytest.approx([0, 300, 800, 1000, 1000, 1000])

    def test_target_line(self, projector):
        report = _report(["1 year"], target=30.0)
        trajectory = projector.project_emissions(10000, report, horizon_years=5)

        targets = [r.target_emissions for r in trajectory.rows]
        assert targets == pytest.approx([10000, 9400, 8800, 8200, 7600, 7000])
        assert trajectory.target_reached_year is None

    def test_projection_floors_at_zero(self, projector):
        report = _report(["6 months"], potential=50000.0)
        trajectory = projector.project_emissions(10000, report, horizon_years=2)
        assert trajectory.rows[-1].projected_emissions == 0
        assert trajectory.target_reached_year == 1

    def test_zero_target_reached_immediately(self, projector):
        report = _report([], target=0.0)
        trajectory = projector.project_emissions(500, report, horizon_years=2)
        assert trajectory.target_reached_year == 0
        assert all(r.projected_emissions == 500 for r in trajectory.rows)
