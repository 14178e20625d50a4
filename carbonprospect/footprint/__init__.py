# -*- coding: utf-8 -*-
"""
CarbonProspect Footprint Engine
===============================

Turns organizational activity data into a scope-classified greenhouse-gas
inventory and evaluates reduction scenarios against it:

- Emission factor lookup with jurisdiction -> GLOBAL fallback
- Scope 1/2/3 aggregation with per-category line items
- Industry reduction strategy catalog and ROI/payback evaluation
- Discounted cash flow projection and emissions trajectory
- Mandatory reporting classification by jurisdiction and tier
- Industry intensity benchmarking
- Versioned scenario persistence (in-memory or SQL) and comparison
- Prometheus metrics and CP_FOOTPRINT_ environment configuration

Example:
    >>> from carbonprospect.footprint import FootprintService, AssessmentRequest
    >>> service = FootprintService.from_defaults()
    >>> result = service.assess(AssessmentRequest(
    ...     industry="retail", jurisdiction="united_states",
    ...     reporting_year=2024, inputs={"electricity": 500000},
    ... ))
    >>> result.compliance.mandatory_group
    0
"""

from carbonprospect.footprint.config import (
    FootprintConfig,
    get_config,
    reset_config,
    set_config,
)
from carbonprospect.footprint.models import (
    NOT_APPLICABLE,
    NOT_AVAILABLE,
    AssessmentRequest,
    AssessmentResult,
    BenchmarkResult,
    ComplianceClassification,
    CurrentEmissions,
    EmissionFactor,
    EmissionsInventory,
    EmissionsTrajectory,
    FinancialProjection,
    ReductionStrategy,
    Scenario,
    ScenarioComparison,
    ScenarioPayload,
    ScenarioUpdate,
    StrategyEvaluation,
    StrategyEvaluationReport,
    ThresholdRule,
)
from carbonprospect.footprint.jurisdictions import normalize_jurisdiction
from carbonprospect.footprint.factor_lookup import FactorLookup
from carbonprospect.footprint.scope_aggregator import ACTIVITY_CATEGORIES, ScopeAggregator
from carbonprospect.footprint.strategy_catalog import StrategyCatalog
from carbonprospect.footprint.strategy_evaluator import StrategyEvaluator
from carbonprospect.footprint.financial_projector import FinancialProjector
from carbonprospect.footprint.compliance_classifier import ComplianceClassifier
from carbonprospect.footprint.benchmarks import IndustryBenchmarks
from carbonprospect.footprint.scenario_store import (
    InMemoryScenarioRepository,
    ScenarioRepository,
    ScenarioStore,
)
from carbonprospect.footprint.sql_repository import SqlScenarioRepository
from carbonprospect.footprint.scenario_comparator import ScenarioComparator
from carbonprospect.footprint.setup import FootprintService

__all__ = [
    "FootprintConfig",
    "get_config",
    "set_config",
    "reset_config",
    "NOT_APPLICABLE",
    "NOT_AVAILABLE",
    "AssessmentRequest",
    "AssessmentResult",
    "BenchmarkResult",
    "ComplianceClassification",
    "CurrentEmissions",
    "EmissionFactor",
    "EmissionsInventory",
    "EmissionsTrajectory",
    "FinancialProjection",
    "ReductionStrategy",
    "Scenario",
    "ScenarioComparison",
    "ScenarioPayload",
    "ScenarioUpdate",
    "StrategyEvaluation",
    "StrategyEvaluationReport",
    "ThresholdRule",
    "normalize_jurisdiction",
    "FactorLookup",
    "ACTIVITY_CATEGORIES",
    "ScopeAggregator",
    "StrategyCatalog",
    "StrategyEvaluator",
    "FinancialProjector",
    "ComplianceClassifier",
    "IndustryBenchmarks",
    "InMemoryScenarioRepository",
    "ScenarioRepository",
    "ScenarioStore",
    "SqlScenarioRepository",
    "ScenarioComparator",
    "FootprintService",
]
