# -*- coding: utf-8 -*-
"""
Scope Aggregator

Turns raw activity quantities into a scope-classified emissions
inventory. Each input category belongs to exactly one scope component
and resolves its factor through the FactorLookup.

Guarantees:
    - Every scope component is present in the inventory, zero if unused
    - Each scope total is the sum of its components
    - The grand total is the sum of the three scope totals
    - Unknown categories are rejected before any factor is resolved

Example:
    >>> from carbonprospect.footprint.factor_lookup import FactorLookup
    >>> from carbonprospect.footprint.scope_aggregator import ScopeAggregator
    >>> agg = ScopeAggregator(FactorLookup.default())
    >>> inv = agg.aggregate({"electricity": 1000}, "AU", 2024)
    >>> inv.scope2.total
    790.0
"""

from __future__ import annotations

import logging
import math
import time
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional

from carbonprospect.exceptions import InvalidActivityQuantity, UnknownCategory
from carbonprospect.footprint.factor_lookup import FactorLookup
from carbonprospect.footprint.metrics import record_operation
from carbonprospect.footprint.models import (
    SCOPE_COMPONENTS,
    ActivityCategory,
    EmissionsInventory,
    LineItem,
    ScopeBreakdown,
)

logger = logging.getLogger(__name__)


def _category(name: str, scope: int, component: str, unit: str,
              factor_category: Optional[str] = None) -> ActivityCategory:
    return ActivityCategory(
        name=name,
        scope=scope,
        component=component,
        unit=unit,
        factor_category=factor_category or name,
    )


ACTIVITY_CATEGORIES: Dict[str, ActivityCategory] = {
    c.name: c for c in [
        # Scope 1
        _category("naturalGas", 1, "stationary", "kWh"),
        _category("diesel", 1, "mobile", "litre"),
        _category("petrol", 1, "mobile", "litre"),
        _category("refrigerantR410a", 1, "refrigerants", "kg"),
        _category("refrigerantR134a", 1, "refrigerants", "kg"),
        _category("refrigerantR22", 1, "refrigerants", "kg"),
        _category("steelProduction", 1, "process", "tonne"),
        _category("cementProduction", 1, "process", "tonne"),
        _category("chemicalUsage", 1, "process", "tonne"),
        _category("livestockCattle", 1, "livestock", "head"),
        _category("livestockPigs", 1, "livestock", "head"),
        _category("livestockSheep", 1, "livestock", "head"),
        _category("fertilizersNitrogen", 1, "fertilizers", "kg N"),
        # Scope 2
        _category("electricity", 2, "electricity", "kWh"),
        _category("dataCenter", 2, "electricity", "kWh", "electricity"),
        _category("steamPurchased", 2, "steam", "MMBtu"),
        _category("heatingPurchased", 2, "heating", "MMBtu"),
        _category("coolingPurchased", 2, "cooling", "MMBtu"),
        # Scope 3
        _category("purchasedGoods", 3, "purchasedGoods", "USD"),
        _category("paperConsumption", 3, "purchasedGoods", "ream"),
        _category("businessFlights", 3, "businessTravel", "passenger-km"),
        _category("employeeCommuting", 3, "employeeCommuting", "passenger-km"),
        _category("wasteGenerated", 3, "waste", "tonne"),
        _category("waterUsage", 3, "waterUsage", "m3"),
    ]
}


def _validated_quantity(category: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidActivityQuantity(category, value)
    quantity = float(value)
    if math.isnan(quantity) or math.isinf(quantity) or quantity < 0:
        raise InvalidActivityQuantity(category, value)
    return quantity


class ScopeAggregator:
    """Builds EmissionsInventory objects from activity inputs.

    Attributes:
        factor_lookup: Factor table used for every resolution.
        categories: Input category definitions.
    """

    def __init__(
        self,
        factor_lookup: FactorLookup,
        categories: Optional[Mapping[str, ActivityCategory]] = None,
    ) -> None:
        self.factor_lookup = factor_lookup
        self.categories: Dict[str, ActivityCategory] = dict(
            categories if categories is not None else ACTIVITY_CATEGORIES
        )

    def aggregate(
        self,
        inputs: Mapping[str, Any],
        jurisdiction_code: str,
        year: int,
    ) -> EmissionsInventory:
        """Compute the emissions inventory for one reporting year.

        Args:
            inputs: Activity quantities keyed by category name.
            jurisdiction_code: Normalized jurisdiction code.
            year: Reporting year used for factor resolution.

        Returns:
            EmissionsInventory in kgCO2e with line items for every
            non-zero input.

        Raises:
            UnknownCategory: If any input key is not a known category.
            InvalidActivityQuantity: If a quantity is negative, NaN,
                infinite or not a number.
            FactorNotFound: If a category has no factor for the year.
        """
        start = time.monotonic()
        unknown = [name for name in inputs if name not in self.categories]
        if unknown:
            record_operation("aggregate", "error", time.monotonic() - start)
            raise UnknownCategory(unknown, list(self.categories))

        quantities = {
            name: _validated_quantity(name, value) for name, value in inputs.items()
        }

        components: Dict[int, Dict[str, float]] = {
            scope: {c: 0.0 for c in names} for scope, names in SCOPE_COMPONENTS.items()
        }
        line_items: List[LineItem] = []

        for name, quantity in quantities.items():
            if quantity == 0:
                continue
            category = self.categories[name]
            factor = self.factor_lookup.resolve(
                category.factor_category, jurisdiction_code, year,
            )
            emissions = quantity * factor.value_per_unit
            scope_components = components[category.scope]
            scope_components[category.component] = (
                scope_components.get(category.component, 0.0) + emissions
            )
            line_items.append(LineItem(
                category=name,
                scope=category.scope,
                component=category.component,
                quantity=quantity,
                unit=category.unit,
                factor_value=factor.value_per_unit,
                factor_jurisdiction=factor.jurisdiction_code,
                emissions=emissions,
            ))

        scopes = {
            scope: ScopeBreakdown(components=values, total=sum(values.values()))
            for scope, values in components.items()
        }
        inventory = EmissionsInventory(
            scope1=scopes[1],
            scope2=scopes[2],
            scope3=scopes[3],
            grand_total=scopes[1].total + scopes[2].total + scopes[3].total,
            jurisdiction_code=jurisdiction_code,
            year=year,
            line_items=line_items,
        )

        record_operation("aggregate", "success", time.monotonic() - start)
        logger.debug(
            "Aggregated %d inputs for %s/%d: %.3f kgCO2e",
            len(line_items), jurisdiction_code, year, inventory.grand_total,
        )
        return inventory


__all__ = ["ACTIVITY_CATEGORIES", "ScopeAggregator"]
