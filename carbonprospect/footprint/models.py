# -*- coding: utf-8 -*-
"""
Footprint Engine Data Models

Pydantic v2 data models shared by every footprint engine component.

Models:
    - Reference data: EmissionFactor, ActivityCategory, ReductionStrategy,
      ThresholdRule, IndustryBenchmark
    - Inventory: LineItem, ScopeBreakdown, EmissionsInventory
    - Evaluation: StrategyEvaluation, StrategyEvaluationReport
    - Projection: ProjectionRow, FinancialProjection, TrajectoryRow,
      EmissionsTrajectory
    - Classification: UpcomingObligation, ComplianceClassification
    - Benchmarking: BenchmarkResult
    - Scenarios: ScenarioPayload, ScenarioUpdate, Scenario,
      CurrentEmissions, ImportResult
    - Comparison: ComparisonRow, ScenarioComparison
    - Service: AssessmentRequest, AssessmentResult

Emission quantities are kilograms of CO2e unless a field name says
otherwise.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Markers
# =============================================================================

NOT_APPLICABLE = "not_applicable"
"""Reported instead of a ratio whose denominator is zero."""

NOT_AVAILABLE = "not_available"
"""Reported in comparisons when a scenario lacks a metric."""

INVENTORY_UNIT = "kgCO2e"
GLOBAL_JURISDICTION = "GLOBAL"

NotApplicable = Literal["not_applicable"]
NotAvailable = Literal["not_available"]

SCOPE_COMPONENTS: Dict[int, List[str]] = {
    1: ["stationary", "mobile", "refrigerants", "process", "livestock", "fertilizers"],
    2: ["electricity", "steam", "heating", "cooling"],
    3: ["purchasedGoods", "businessTravel", "employeeCommuting", "waste", "waterUsage"],
}


def _utcnow() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# Reference Data
# =============================================================================


class EmissionFactor(BaseModel):
    """Conversion factor from an activity quantity to kgCO2e."""
    category: str = Field(..., description="Factor category, e.g. 'electricity'")
    jurisdiction_code: str = Field(..., description="Jurisdiction code or GLOBAL")
    year: int = Field(..., description="Reporting year the factor applies to")
    value_per_unit: float = Field(..., ge=0, description="kgCO2e per activity unit")
    unit: str = Field(..., description="Activity unit, e.g. 'kWh'")
    is_default: bool = Field(default=False, description="GLOBAL fallback row")
    source: str = Field(default="", description="Publication the value comes from")

    model_config = {"extra": "forbid", "frozen": True}


class ActivityCategory(BaseModel):
    """Placement of an input category in the inventory."""
    name: str = Field(..., description="Input key, e.g. 'dataCenter'")
    scope: int = Field(..., ge=1, le=3, description="GHG Protocol scope")
    component: str = Field(..., description="Inventory component within the scope")
    unit: str = Field(..., description="Expected input unit")
    factor_category: str = Field(..., description="Emission factor category used")

    model_config = {"extra": "forbid", "frozen": True}


class ReductionStrategy(BaseModel):
    """Catalog entry for an emissions reduction measure."""
    strategy_id: str = Field(..., description="Unique strategy identifier")
    industry: str = Field(..., description="Industry the strategy applies to")
    scope: int = Field(..., ge=1, le=3, description="Scope the reduction lands in")
    name: str = Field(..., description="Display name")
    description: str = Field(default="", description="What the measure involves")
    timeframe_label: str = Field(..., description="Implementation time, e.g. '1-3 years'")
    difficulty: str = Field(..., description="Low, Medium or High")
    capex: float = Field(..., ge=0, description="Up-front capital cost")
    annual_opex_savings: float = Field(..., description="Yearly operating savings")
    reduction_potential: float = Field(
        ..., ge=0, description="Absolute annual reduction in kgCO2e",
    )

    model_config = {"extra": "forbid", "frozen": True}


class ThresholdRule(BaseModel):
    """Mandatory-reporting threshold for one tier in one jurisdiction."""
    jurisdiction_code: str = Field(..., description="Jurisdiction code")
    group: int = Field(..., ge=1, description="Ordinal tier; higher is stricter")
    label: str = Field(..., description="Human-readable regime and tier")
    min_emissions_tco2e: Optional[float] = Field(None, ge=0, description="Tonnes CO2e")
    min_revenue: Optional[float] = Field(None, ge=0, description="Annual revenue")
    min_employees: Optional[int] = Field(None, ge=0, description="Headcount")
    match: Literal["any", "all"] = Field(
        default="any", description="Whether one or all thresholds must be met",
    )
    effective_date: date = Field(..., description="First date the obligation applies")

    model_config = {"extra": "forbid", "frozen": True}

    def thresholds(self) -> Dict[str, float]:
        """Configured thresholds keyed by dimension."""
        values = {
            "emissions": self.min_emissions_tco2e,
            "revenue": self.min_revenue,
            "employees": self.min_employees,
        }
        return {k: float(v) for k, v in values.items() if v is not None}


class IndustryBenchmark(BaseModel):
    """Emission intensity distribution for an industry."""
    industry: str = Field(..., description="Industry key")
    intensity_percentiles: Dict[int, float] = Field(
        ..., description="tCO2e per $1M revenue at percentiles 10/25/50/75/90",
    )
    scope_share_median: Dict[int, float] = Field(
        ..., description="Median share of each scope, percent",
    )
    average_target_percent: float = Field(..., description="Typical reduction target")
    leaders_target_percent: float = Field(..., description="Leading-quartile target")
    source: str = Field(default="", description="Data source")

    model_config = {"extra": "forbid", "frozen": True}


# =============================================================================
# Inventory
# =============================================================================


class LineItem(BaseModel):
    """Emissions contributed by one input category."""
    category: str = Field(..., description="Input category")
    scope: int = Field(..., ge=1, le=3)
    component: str = Field(..., description="Inventory component")
    quantity: float = Field(..., description="Activity quantity")
    unit: str = Field(..., description="Activity unit")
    factor_value: float = Field(..., description="kgCO2e per unit applied")
    factor_jurisdiction: str = Field(..., description="Jurisdiction the factor came from")
    emissions: float = Field(..., description="kgCO2e")

    model_config = {"extra": "forbid"}


class ScopeBreakdown(BaseModel):
    """Component emissions for one scope."""
    components: Dict[str, float] = Field(default_factory=dict)
    total: float = Field(default=0.0)

    model_config = {"extra": "forbid"}

    @classmethod
    def zero(cls, scope: int) -> ScopeBreakdown:
        return cls(components={c: 0.0 for c in SCOPE_COMPONENTS[scope]}, total=0.0)


class EmissionsInventory(BaseModel):
    """Scope-classified greenhouse-gas inventory."""
    scope1: ScopeBreakdown = Field(default_factory=lambda: ScopeBreakdown.zero(1))
    scope2: ScopeBreakdown = Field(default_factory=lambda: ScopeBreakdown.zero(2))
    scope3: ScopeBreakdown = Field(default_factory=lambda: ScopeBreakdown.zero(3))
    grand_total: float = Field(default=0.0)
    unit: str = Field(default=INVENTORY_UNIT)
    jurisdiction_code: Optional[str] = Field(None)
    year: Optional[int] = Field(None)
    line_items: List[LineItem] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @classmethod
    def empty(cls, jurisdiction_code: Optional[str] = None,
              year: Optional[int] = None) -> EmissionsInventory:
        """All-zero inventory with every component present."""
        return cls(jurisdiction_code=jurisdiction_code, year=year)

    def scope(self, number: int) -> ScopeBreakdown:
        return {1: self.scope1, 2: self.scope2, 3: self.scope3}[number]

    def scope_totals(self) -> Dict[int, float]:
        return {1: self.scope1.total, 2: self.scope2.total, 3: self.scope3.total}

    def to_tonnes(self) -> Dict[str, Any]:
        """Presentation view in tonnes CO2e, rounded to 3 decimals."""
        def _t(value: float) -> float:
            return round(value / 1000.0, 3)

        return {
            "unit": "tCO2e",
            "scope1": {k: _t(v) for k, v in self.scope1.components.items()},
            "scope2": {k: _t(v) for k, v in self.scope2.components.items()},
            "scope3": {k: _t(v) for k, v in self.scope3.components.items()},
            "scope1_total": _t(self.scope1.total),
            "scope2_total": _t(self.scope2.total),
            "scope3_total": _t(self.scope3.total),
            "grand_total": _t(self.grand_total),
        }


# =============================================================================
# Strategy Evaluation
# =============================================================================


class StrategyEvaluation(BaseModel):
    """Financial and reduction metrics for one selected strategy."""
    strategy_id: str
    name: str
    scope: int
    timeframe_label: str = ""
    capex: float
    annual_opex_savings: float
    reduction_potential: float = Field(..., description="kgCO2e per year")
    roi_percent: Union[float, NotApplicable]
    payback_years: Union[float, NotApplicable]
    cumulative_reduction: float = Field(
        ..., description="Running reduction total in rank order",
    )
    rank: int = Field(..., ge=1)

    model_config = {"extra": "forbid"}


class StrategyEvaluationReport(BaseModel):
    """Ranked evaluation of a strategy bundle against a reduction target."""
    industry: str
    evaluations: List[StrategyEvaluation] = Field(default_factory=list)
    total_capex: float = 0.0
    total_annual_savings: float = 0.0
    cumulative_reduction: float = 0.0
    reduction_target_percent: float = 0.0
    target_reduction: float = Field(0.0, description="kgCO2e needed to hit the target")
    target_met: bool = False
    bundle_roi_percent: Union[float, NotApplicable] = NOT_APPLICABLE
    bundle_payback_years: Union[float, NotApplicable] = NOT_APPLICABLE
    reductions_by_scope: Dict[int, float] = Field(default_factory=dict)
    reduction_percent_of_total: Union[float, NotApplicable] = NOT_APPLICABLE
    warnings: List[str] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @property
    def selected_ids(self) -> List[str]:
        return [e.strategy_id for e in self.evaluations]


# =============================================================================
# Projection
# =============================================================================


class ProjectionRow(BaseModel):
    """Cash flow position for one year of a projection."""
    year: int
    net_cash_flow: float
    cumulative_cash_flow: float
    discounted_cash_flow: float
    cumulative_npv: float

    model_config = {"extra": "forbid"}


class FinancialProjection(BaseModel):
    """Multi-year discounted cash flow projection."""
    horizon_years: int
    discount_rate: float
    capex: float
    annual_savings: float
    rows: List[ProjectionRow] = Field(default_factory=list)
    npv: float = 0.0
    payback_year: Optional[int] = Field(
        None, description="First year cumulative cash flow is non-negative",
    )
    discounted_payback_year: Optional[int] = Field(
        None, description="First year cumulative NPV is non-negative",
    )

    model_config = {"extra": "forbid"}


class TrajectoryRow(BaseModel):
    """Projected emissions position for one year."""
    year: int
    baseline_emissions: float
    projected_emissions: float
    target_emissions: float
    realized_reduction: float

    model_config = {"extra": "forbid"}


class EmissionsTrajectory(BaseModel):
    """Emissions path as selected strategies are phased in."""
    baseline_emissions: float
    reduction_target_percent: float
    rows: List[TrajectoryRow] = Field(default_factory=list)
    target_reached_year: Optional[int] = None

    model_config = {"extra": "forbid"}


# =============================================================================
# Compliance
# =============================================================================


class UpcomingObligation(BaseModel):
    """A rule the organization meets that is not yet in force."""
    mandatory_group: int
    rule_label: str
    effective_date: date

    model_config = {"extra": "forbid"}


class ComplianceClassification(BaseModel):
    """Mandatory reporting tier at a point in time."""
    jurisdiction_code: str
    mandatory_group: int = Field(..., ge=0, description="0 = not mandatory")
    effective_date: Optional[date] = None
    rule_label: Optional[str] = None
    as_of: date
    upcoming: List[UpcomingObligation] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @property
    def is_mandatory(self) -> bool:
        return self.mandatory_group > 0


# =============================================================================
# Benchmarking
# =============================================================================


class BenchmarkResult(BaseModel):
    """Position of an organization within its industry distribution."""
    industry: str
    available: bool = True
    intensity_tco2e_per_million: Optional[float] = None
    percentile_band: Optional[str] = None
    industry_median_intensity: Optional[float] = None
    scope_share: Dict[int, float] = Field(default_factory=dict)
    scope_share_delta: Dict[int, float] = Field(default_factory=dict)
    target_ambition: Optional[Literal["below_average", "average", "leader"]] = None
    warnings: List[str] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


# =============================================================================
# Scenarios
# =============================================================================


class ScenarioPayload(BaseModel):
    """Typed top-level fields of a stored scenario.

    Every field is optional so a payload can be built up across several
    merges. Unknown keys are rejected.
    """
    industry: Optional[str] = None
    jurisdiction_code: Optional[str] = None
    reporting_year: Optional[int] = None
    annual_revenue: Optional[float] = Field(None, ge=0)
    employee_count: Optional[int] = Field(None, ge=0)
    inputs: Optional[Dict[str, float]] = None
    inventory: Optional[EmissionsInventory] = None
    selected_strategies: Optional[List[str]] = None
    reduction_target_percent: Optional[float] = Field(None, ge=0, le=100)
    evaluation: Optional[StrategyEvaluationReport] = None
    financial: Optional[FinancialProjection] = None
    compliance: Optional[ComplianceClassification] = None
    notes: Optional[str] = None

    model_config = {"extra": "forbid"}

    def to_fields(self) -> Dict[str, Any]:
        """JSON-ready mapping of the fields that were explicitly set."""
        return self.model_dump(mode="json", exclude_unset=True)


class ScenarioUpdate(ScenarioPayload):
    """Partial update merged into a stored scenario payload."""


class Scenario(BaseModel):
    """One saved version of a footprint's inputs and results."""
    scenario_id: str
    footprint_id: str
    name: str
    created_at: datetime
    updated_at: datetime
    revision: int = Field(0, description="Store-wide write counter")
    schema_version: int
    data: ScenarioPayload = Field(default_factory=ScenarioPayload)
    warnings: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @property
    def inventory(self) -> Optional[EmissionsInventory]:
        return self.data.inventory

    @property
    def has_inventory(self) -> bool:
        return self.data.inventory is not None


class CurrentEmissions(BaseModel):
    """Latest computed emissions for a footprint."""
    footprint_id: str
    has_emissions: bool
    scenario_id: Optional[str] = None
    scenario_name: Optional[str] = None
    inventory: EmissionsInventory = Field(default_factory=EmissionsInventory.empty)
    reduction_target_percent: float
    updated_at: Optional[datetime] = None
    warnings: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class ImportResult(BaseModel):
    """Outcome of importing an exported scenario list."""
    imported: List[str] = Field(default_factory=list, description="New scenario ids")
    skipped: int = 0
    warnings: List[str] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


# =============================================================================
# Comparison
# =============================================================================


class ComparisonRow(BaseModel):
    """One metric across the compared scenarios."""
    metric: str
    label: str
    values: List[Union[float, NotAvailable]]
    deltas: List[Union[float, NotAvailable]]

    model_config = {"extra": "forbid"}


class ScenarioComparison(BaseModel):
    """Side-by-side metrics for 2 or 3 scenarios."""
    scenario_ids: List[str]
    scenario_names: List[str]
    rows: List[ComparisonRow] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    def row(self, metric: str) -> ComparisonRow:
        for row in self.rows:
            if row.metric == metric:
                return row
        raise KeyError(metric)

    def to_records(self) -> List[Dict[str, Any]]:
        """Flatten to one dict per metric keyed by scenario name."""
        records = []
        for row in self.rows:
            record: Dict[str, Any] = {"metric": row.label}
            for name, value in zip(self.scenario_names, row.values):
                record[name] = value
            records.append(record)
        return records


# =============================================================================
# Service
# =============================================================================


class AssessmentRequest(BaseModel):
    """Everything needed to run a full footprint assessment."""
    industry: str = Field(..., description="Catalog industry key")
    jurisdiction: str = Field(..., description="Country name or jurisdiction code")
    reporting_year: int = Field(..., ge=1990, le=2100)
    annual_revenue: Optional[float] = Field(None, ge=0)
    employee_count: Optional[int] = Field(None, ge=0)
    inputs: Dict[str, Any] = Field(default_factory=dict)
    selected_strategies: List[str] = Field(default_factory=list)
    potential_overrides: Dict[str, float] = Field(default_factory=dict)
    reduction_target_percent: Optional[float] = Field(None, ge=0, le=100)
    horizon_years: Optional[int] = None
    discount_rate: Optional[float] = None
    as_of: Optional[date] = None

    model_config = {"extra": "forbid"}

    @field_validator("industry")
    @classmethod
    def _normalize_industry(cls, value: str) -> str:
        return value.strip().lower()


class AssessmentResult(BaseModel):
    """Combined output of one assessment run."""
    industry: str
    jurisdiction_code: str
    reporting_year: int
    inventory: EmissionsInventory
    evaluation: StrategyEvaluationReport
    financial: FinancialProjection
    trajectory: EmissionsTrajectory
    compliance: ComplianceClassification
    benchmark: BenchmarkResult
    warnings: List[str] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


__all__ = [
    "NOT_APPLICABLE",
    "NOT_AVAILABLE",
    "INVENTORY_UNIT",
    "GLOBAL_JURISDICTION",
    "SCOPE_COMPONENTS",
    "EmissionFactor",
    "ActivityCategory",
    "ReductionStrategy",
    "ThresholdRule",
    "IndustryBenchmark",
    "LineItem",
    "ScopeBreakdown",
    "EmissionsInventory",
    "StrategyEvaluation",
    "StrategyEvaluationReport",
    "ProjectionRow",
    "FinancialProjection",
    "TrajectoryRow",
    "EmissionsTrajectory",
    "UpcomingObligation",
    "ComplianceClassification",
    "BenchmarkResult",
    "ScenarioPayload",
    "ScenarioUpdate",
    "Scenario",
    "CurrentEmissions",
    "ImportResult",
    "ComparisonRow",
    "ScenarioComparison",
    "AssessmentRequest",
    "AssessmentResult",
]
