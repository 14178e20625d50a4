# -*- coding: utf-8 -*-
"""
Scenario Payload Migrations

Stored scenario payloads carry a schema version. Older payloads are
upgraded one version at a time when read, so the rest of the engine only
ever sees the current layout.

Versions:
    0: Free-form camelCase documents written by the legacy web
       application (``rawInputs``, ``emissions`` in tonnes,
       ``reductionStrategies``, ``reductionTarget``, ...).
    1: Typed ScenarioPayload fields, emissions in kgCO2e.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict

from carbonprospect.footprint.jurisdictions import normalize_jurisdiction
from carbonprospect.footprint.models import INVENTORY_UNIT, SCOPE_COMPONENTS

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

_V0_RENAMES = {
    "reportingYear": "reporting_year",
    "industryType": "industry",
    "reductionTarget": "reduction_target_percent",
    "annualRevenue": "annual_revenue",
    "employeeCount": "employee_count",
}

# Presentation-only keys the web application stored alongside its data.
_V0_OBSOLETE = {"emissionValues", "lastEmissionsUpdate", "projectId", "scenarioId"}

_V0_COMPONENT_ALIASES = {
    "purchased_goods": "purchasedGoods",
    "business_travel": "businessTravel",
    "employee_commuting": "employeeCommuting",
    "water_usage": "waterUsage",
}


def _number(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    return value


def _v0_inventory(emissions: Any) -> Any:
    """Convert a tonne-denominated scope document into an inventory dict.

    Scope totals are recomputed from components; a legacy scope that only
    carried a ``total`` becomes all-zero components.
    """
    if not isinstance(emissions, dict):
        return emissions

    inventory: Dict[str, Any] = {"unit": INVENTORY_UNIT}
    grand_total = 0.0
    for scope, names in SCOPE_COMPONENTS.items():
        legacy = emissions.get(f"scope{scope}") or {}
        if not isinstance(legacy, dict):
            return emissions
        components = {name: 0.0 for name in names}
        for key, value in legacy.items():
            name = _V0_COMPONENT_ALIASES.get(key, key)
            if name not in components:
                continue
            value = _number(value)
            if not isinstance(value, (int, float)):
                return emissions
            components[name] = float(value) * 1000.0
        total = sum(components.values())
        grand_total += total
        inventory[f"scope{scope}"] = {"components": components, "total": total}
    inventory["grand_total"] = grand_total
    return inventory


def _v0_strategies(strategies: Any) -> Any:
    if not isinstance(strategies, list):
        return strategies
    ids = []
    for item in strategies:
        if isinstance(item, dict):
            item = item.get("strategy_id") or item.get("id")
        if item:
            ids.append(str(item))
    return ids


def _v0_to_v1(data: Dict[str, Any]) -> Dict[str, Any]:
    upgraded: Dict[str, Any] = {}
    for key, value in data.items():
        if key in _V0_OBSOLETE:
            continue
        if key in _V0_RENAMES:
            upgraded[_V0_RENAMES[key]] = _number(value)
        elif key == "location":
            upgraded["jurisdiction_code"] = normalize_jurisdiction(str(value))
        elif key == "rawInputs" and isinstance(value, dict):
            upgraded["inputs"] = {k: _number(v) for k, v in value.items()}
        elif key == "emissions":
            upgraded["inventory"] = _v0_inventory(value)
        elif key == "reductionStrategies":
            upgraded["selected_strategies"] = _v0_strategies(value)
        else:
            upgraded[key] = value
    for key in ("reporting_year", "employee_count"):
        value = upgraded.get(key)
        # Non-whole values are left for field validation to reject.
        if isinstance(value, float) and math.isfinite(value) and value.is_integer():
            upgraded[key] = int(value)
    return upgraded


MIGRATIONS: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    0: _v0_to_v1,
}


def migrate(data: Dict[str, Any], from_version: int) -> Dict[str, Any]:
    """Upgrade a payload mapping to ``SCHEMA_VERSION``.

    Payloads from a newer schema are returned unchanged; the field-level
    validation on read discards whatever this version cannot interpret.

    Raises:
        ValueError: If no migration path exists from ``from_version``.
    """
    version = from_version
    if version < 0:
        raise ValueError(f"Unknown payload schema version {version}")
    if version > SCHEMA_VERSION:
        logger.warning(
            "Payload schema version %d is newer than supported version %d",
            version, SCHEMA_VERSION,
        )
        return data
    while version < SCHEMA_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise ValueError(f"No migration from payload schema version {version}")
        data = step(data)
        version += 1
        logger.debug("Migrated scenario payload to schema version %d", version)
    return data


__all__ = ["SCHEMA_VERSION", "MIGRATIONS", "migrate"]
