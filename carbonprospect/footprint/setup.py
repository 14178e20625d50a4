# -*- coding: utf-8 -*-
"""
Footprint Service Setup

Provides the ``FootprintService`` facade that wires the footprint engine
components together and runs a complete assessment:

    jurisdiction normalization -> scope aggregation -> strategy evaluation
    -> financial projection -> emissions trajectory -> compliance
    classification -> industry benchmarking

Every collaborator is injectable; ``FootprintService.from_defaults()``
builds one from the packaged reference data and an in-memory scenario
repository. There is no process-wide service instance.

Usage:
    >>> from carbonprospect.footprint.setup import FootprintService
    >>> service = FootprintService.from_defaults()
    >>> result = service.assess(AssessmentRequest(
    ...     industry="office", jurisdiction="Australia", reporting_year=2024,
    ...     inputs={"electricity": 120000}, selected_strategies=["remote-work-policy"],
    ... ))
    >>> result.inventory.scope2.total
    94800.0
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Union

from carbonprospect.footprint.benchmarks import IndustryBenchmarks
from carbonprospect.footprint.compliance_classifier import ComplianceClassifier
from carbonprospect.footprint.config import FootprintConfig, get_config
from carbonprospect.footprint.factor_lookup import FactorLookup
from carbonprospect.footprint.financial_projector import FinancialProjector
from carbonprospect.footprint.jurisdictions import normalize_jurisdiction
from carbonprospect.footprint.metrics import record_operation
from carbonprospect.footprint.models import (
    GLOBAL_JURISDICTION,
    AssessmentRequest,
    AssessmentResult,
    Scenario,
    ScenarioPayload,
    ScenarioUpdate,
)
from carbonprospect.footprint.scenario_comparator import ScenarioComparator
from carbonprospect.footprint.scenario_store import (
    InMemoryScenarioRepository,
    ScenarioRepository,
    ScenarioStore,
)
from carbonprospect.footprint.scope_aggregator import ScopeAggregator
from carbonprospect.footprint.sql_repository import SqlScenarioRepository
from carbonprospect.footprint.strategy_catalog import StrategyCatalog
from carbonprospect.footprint.strategy_evaluator import StrategyEvaluator

logger = logging.getLogger(__name__)

DEFAULT_SCENARIO_NAME = "Initial Emissions Scenario"


class FootprintService:
    """Unified facade over the footprint engine.

    Attributes:
        config: FootprintConfig instance.
        factor_lookup: Emission factor table.
        aggregator: ScopeAggregator over ``factor_lookup``.
        catalog: Reduction strategy catalog.
        evaluator: StrategyEvaluator over ``catalog``.
        projector: FinancialProjector.
        classifier: ComplianceClassifier.
        benchmarks: IndustryBenchmarks.
        store: ScenarioStore.
        comparator: ScenarioComparator over ``store``.
    """

    def __init__(
        self,
        factor_lookup: FactorLookup,
        catalog: StrategyCatalog,
        classifier: ComplianceClassifier,
        benchmarks: IndustryBenchmarks,
        store: ScenarioStore,
        config: Optional[FootprintConfig] = None,
    ) -> None:
        self.config = config or get_config()
        self.factor_lookup = factor_lookup
        self.aggregator = ScopeAggregator(factor_lookup)
        self.catalog = catalog
        self.evaluator = StrategyEvaluator(catalog)
        self.projector = FinancialProjector(self.config)
        self.classifier = classifier
        self.benchmarks = benchmarks
        self.store = store
        self.comparator = ScenarioComparator(store)
        self._started = False

        logger.info("FootprintService facade created")

    @classmethod
    def from_defaults(
        cls,
        config: Optional[FootprintConfig] = None,
        repository: Optional[ScenarioRepository] = None,
    ) -> FootprintService:
        """Build a service from reference data files.

        Args:
            config: Configuration; its ``*_path`` fields override the
                packaged data files. Uses the shared config if None.
            repository: Scenario repository. If None, a SQL repository on
                ``config.database_url`` when set, otherwise in-memory.
        """
        config = config or get_config()
        if repository is None:
            if config.database_url:
                repository = SqlScenarioRepository.from_url(config.database_url)
            else:
                repository = InMemoryScenarioRepository()
        return cls(
            factor_lookup=FactorLookup.default(config.emission_factors_path or None),
            catalog=StrategyCatalog.default(config.strategy_catalog_path or None),
            classifier=ComplianceClassifier.default(config.compliance_rules_path or None),
            benchmarks=IndustryBenchmarks.default(config.benchmarks_path or None),
            store=ScenarioStore(repository, config=config),
            config=config,
        )

    # ------------------------------------------------------------------
    # Assessment
    # ------------------------------------------------------------------

    def assess(
        self,
        request: Union[AssessmentRequest, Mapping[str, Any]],
    ) -> AssessmentResult:
        """Run the full assessment pipeline for one organization.

        Args:
            request: AssessmentRequest or an equivalent mapping.

        Returns:
            AssessmentResult combining every component's output.

        Raises:
            UnknownCategory, InvalidActivityQuantity, FactorNotFound,
            StrategyNotFound, InvalidDiscountRate, InvalidProjectionHorizon:
                From the underlying components.
        """
        start = time.monotonic()
        if not isinstance(request, AssessmentRequest):
            request = AssessmentRequest.model_validate(dict(request))

        warnings: List[str] = []
        code = normalize_jurisdiction(request.jurisdiction)
        if code == GLOBAL_JURISDICTION and request.jurisdiction.strip().lower() not in ("global", "world"):
            warnings.append(
                f"Unrecognized jurisdiction '{request.jurisdiction}'; "
                "using GLOBAL emission factors"
            )

        target = request.reduction_target_percent
        if target is None:
            target = self.config.default_reduction_target_percent

        inventory = self.aggregator.aggregate(request.inputs, code, request.reporting_year)
        evaluation = self.evaluator.evaluate(
            request.industry,
            request.selected_strategies,
            inventory,
            target,
            potential_overrides=request.potential_overrides,
        )
        financial = self.projector.project_bundle(
            evaluation, request.horizon_years, request.discount_rate,
        )
        trajectory = self.projector.project_emissions(
            inventory.grand_total, evaluation, request.horizon_years,
        )
        compliance = self.classifier.classify(
            code,
            inventory.grand_total,
            request.annual_revenue,
            request.employee_count,
            request.as_of,
        )
        benchmark = self.benchmarks.benchmark(
            request.industry, inventory, request.annual_revenue, target,
        )
        warnings.extend(evaluation.warnings)
        warnings.extend(benchmark.warnings)

        record_operation("assess", "success", time.monotonic() - start)
        logger.info(
            "Assessment for %s/%s/%d: %.1f kgCO2e, %d strategies, group %d",
            request.industry, code, request.reporting_year,
            inventory.grand_total, len(evaluation.evaluations),
            compliance.mandatory_group,
        )
        return AssessmentResult(
            industry=request.industry,
            jurisdiction_code=code,
            reporting_year=request.reporting_year,
            inventory=inventory,
            evaluation=evaluation,
            financial=financial,
            trajectory=trajectory,
            compliance=compliance,
            benchmark=benchmark,
            warnings=warnings,
        )

    @staticmethod
    def _payload_fields(
        request: AssessmentRequest,
        result: AssessmentResult,
    ) -> Dict[str, Any]:
        return {
            "industry": result.industry,
            "jurisdiction_code": result.jurisdiction_code,
            "reporting_year": result.reporting_year,
            "annual_revenue": request.annual_revenue,
            "employee_count": request.employee_count,
            "inputs": {k: float(v) for k, v in request.inputs.items()},
            "inventory": result.inventory,
            "selected_strategies": result.evaluation.selected_ids,
            "reduction_target_percent": result.evaluation.reduction_target_percent,
            "evaluation": result.evaluation,
            "financial": result.financial,
            "compliance": result.compliance,
        }

    def save_assessment(
        self,
        footprint_id: str,
        name: str,
        request: Union[AssessmentRequest, Mapping[str, Any]],
    ) -> Scenario:
        """Assess and persist the result as a new scenario."""
        if not isinstance(request, AssessmentRequest):
            request = AssessmentRequest.model_validate(dict(request))
        result = self.assess(request)
        return self.store.create_scenario(
            footprint_id, name, ScenarioPayload(**self._payload_fields(request, result)),
        )

    def record_emissions(
        self,
        footprint_id: str,
        request: Union[AssessmentRequest, Mapping[str, Any]],
    ) -> Scenario:
        """Assess and merge the result into the footprint's latest scenario.

        Creates an initial scenario when the footprint has none.
        """
        if not isinstance(request, AssessmentRequest):
            request = AssessmentRequest.model_validate(dict(request))
        result = self.assess(request)
        update = ScenarioUpdate(**self._payload_fields(request, result))

        scenarios = self.store.list_scenarios(footprint_id)
        if not scenarios:
            return self.store.create_scenario(footprint_id, DEFAULT_SCENARIO_NAME, update)
        return self.store.update_scenario(scenarios[-1].scenario_id, update)

    # ------------------------------------------------------------------
    # Metrics and lifecycle
    # ------------------------------------------------------------------

    def get_metrics(self) -> Dict[str, Any]:
        """Summary of the loaded reference data and stored scenarios."""
        return {
            "started": self._started,
            "emission_factors": len(self.factor_lookup),
            "strategies": len(self.catalog),
            "compliance_jurisdictions": len(self.classifier.jurisdictions()),
            "benchmark_industries": len(self.benchmarks.industries()),
            "scenarios": self.store.repository.count(),
        }

    def startup(self) -> None:
        """Start the service. Safe to call multiple times."""
        if self._started:
            logger.debug("FootprintService already started; skipping")
            return
        self._started = True
        logger.info("FootprintService startup complete")

    def shutdown(self) -> None:
        if not self._started:
            return
        self._started = False
        logger.info("FootprintService shut down")


__all__ = ["FootprintService", "DEFAULT_SCENARIO_NAME"]
