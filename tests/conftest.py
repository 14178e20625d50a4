# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from carbonprospect.footprint.benchmarks import IndustryBenchmarks
from carbonprospect.footprint.compliance_classifier import ComplianceClassifier
from carbonprospect.footprint.config import FootprintConfig, reset_config, set_config
from carbonprospect.footprint.factor_lookup import FactorLookup
from carbonprospect.footprint.models import EmissionFactor
from carbonprospect.footprint.scenario_store import InMemoryScenarioRepository, ScenarioStore
from carbonprospect.footprint.scope_aggregator import ScopeAggregator
from carbonprospect.footprint.setup import FootprintService
from carbonprospect.footprint.sql_repository import SqlScenarioRepository
from carbonprospect.footprint.strategy_catalog import StrategyCatalog


class FakeClock:
    """Deterministic clock advanced explicitly by tests."""

    def __init__(self, start=None):
        self.now = start or datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds=1.0):
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture(autouse=True)
def default_config():
    """Install a default config so tests never depend on the environment."""
    config = FootprintConfig()
    set_config(config)
    yield config
    reset_config()


@pytest.fixture(scope="session")
def factor_lookup():
    return FactorLookup.default()


@pytest.fixture
def small_lookup():
    """Factor table with an AU electricity override and GLOBAL defaults."""
    return FactorLookup([
        EmissionFactor(category="electricity", jurisdiction_code="AU", year=2024,
                       value_per_unit=0.8, unit="kWh"),
        EmissionFactor(category="electricity", jurisdiction_code="GLOBAL", year=2024,
                       value_per_unit=0.5, unit="kWh", is_default=True),
        EmissionFactor(category="diesel", jurisdiction_code="GLOBAL", year=2024,
                       value_per_unit=2.68, unit="litre", is_default=True),
    ])


@pytest.fixture
def aggregator(factor_lookup):
    return ScopeAggregator(factor_lookup)


@pytest.fixture(scope="session")
def catalog():
    return StrategyCatalog.default()


@pytest.fixture(scope="session")
def classifier():
    return ComplianceClassifier.default()


@pytest.fixture(scope="session")
def benchmarks():
    return IndustryBenchmarks.default()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(params=["memory", "sql"])
def repository(request):
    if request.param == "memory":
        return InMemoryScenarioRepository()
    return SqlScenarioRepository.from_url("sqlite:///:memory:")


@pytest.fixture
def store(repository, default_config, clock):
    return ScenarioStore(repository, config=default_config, clock=clock)


@pytest.fixture
def service(default_config):
    return FootprintService.from_defaults(default_config)


@pytest.fixture
def office_request():
    return {
        "industry": "office",
        "jurisdiction": "Australia",
        "reporting_year": 2024,
        "annual_revenue": 10_000_000,
        "employee_count": 120,
        "inputs": {
            "electricity": 100000,
            "naturalGas": 20000,
            "businessFlights": 50000,
            "employeeCommuting": 200000,
            "paperConsumption": 100,
        },
        "selected_strategies": ["remote-work-policy", "renewable-energy-office"],
        "reduction_target_percent": 30,
        "as_of": "2025-06-30",
    }
