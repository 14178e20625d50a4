# -*- coding: utf-8 -*-
"""
Compliance Classifier

Classifies an organization into a mandatory climate-reporting tier for
its jurisdiction from total emissions, revenue and headcount.

Rules are evaluated from the highest tier down and the first match wins.
Rules not yet in force on the ``as_of`` date are skipped and reported
as upcoming obligations. Jurisdictions without rules always classify as
group 0 (voluntary reporting).

Example:
    >>> from datetime import date
    >>> classifier = ComplianceClassifier.default()
    >>> result = classifier.classify("AU", 150_000_000, 100e6, 80, date(2025, 6, 30))
    >>> result.mandatory_group, result.rule_label
    (3, 'ASRS Group 1 (large entities)')
"""

from __future__ import annotations

import logging
import math
import time
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from carbonprospect.exceptions import ConfigurationError, ValidationError
from carbonprospect.footprint.metrics import record_operation
from carbonprospect.footprint.models import (
    ComplianceClassification,
    ThresholdRule,
    UpcomingObligation,
)
from carbonprospect.footprint.reference_data import (
    COMPLIANCE_RULES_FILE,
    load_document,
    resolve_path,
)

logger = logging.getLogger(__name__)

KG_PER_TONNE = 1000.0


def parse_rules(document: Mapping[str, Any]) -> List[ThresholdRule]:
    """Read ``jurisdictions: {code: [rule, ...]}`` into ThresholdRule models."""
    rules: List[ThresholdRule] = []
    for code, entries in (document.get("jurisdictions") or {}).items():
        for entry in entries or []:
            try:
                rules.append(
                    ThresholdRule(jurisdiction_code=str(code).upper(), **entry)
                )
            except (PydanticValidationError, TypeError) as exc:
                raise ConfigurationError(
                    f"Invalid threshold rule for {code}: {exc}",
                    component="ComplianceClassifier",
                ) from exc
    return rules


def _check_tiers(code: str, tiers: List[ThresholdRule]) -> None:
    """Reject duplicate groups, empty rules and non-monotonic thresholds."""
    seen = set()
    for rule in tiers:
        if rule.group in seen:
            raise ConfigurationError(
                f"{code} defines group {rule.group} more than once",
                component="ComplianceClassifier",
            )
        seen.add(rule.group)
        if not rule.thresholds():
            raise ConfigurationError(
                f"{code} group {rule.group} has no thresholds",
                component="ComplianceClassifier",
            )

    ordered = sorted(tiers, key=lambda r: r.group)
    for lower, higher in zip(ordered, ordered[1:]):
        low, high = lower.thresholds(), higher.thresholds()
        for dimension in low.keys() & high.keys():
            if high[dimension] < low[dimension]:
                raise ConfigurationError(
                    f"{code} group {higher.group} has a lower {dimension} "
                    f"threshold than group {lower.group}",
                    component="ComplianceClassifier",
                    context={"dimension": dimension},
                )


class ComplianceClassifier:
    """Threshold-based mandatory reporting classification."""

    def __init__(self, rules: Iterable[ThresholdRule]) -> None:
        """Group rules by jurisdiction, highest tier first.

        Raises:
            ConfigurationError: If a jurisdiction's tiers are inconsistent.
        """
        self._rules: Dict[str, List[ThresholdRule]] = {}
        for rule in rules:
            self._rules.setdefault(rule.jurisdiction_code, []).append(rule)
        for code, tiers in self._rules.items():
            _check_tiers(code, tiers)
            tiers.sort(key=lambda r: r.group, reverse=True)

        logger.info(
            "ComplianceClassifier initialized with rules for %d jurisdictions",
            len(self._rules),
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> ComplianceClassifier:
        return cls(parse_rules(load_document(path)))

    @classmethod
    def default(cls, path: Optional[Union[str, Path]] = None) -> ComplianceClassifier:
        return cls.from_file(resolve_path(path, COMPLIANCE_RULES_FILE))

    def jurisdictions(self) -> List[str]:
        return sorted(self._rules)

    def rules_for(self, jurisdiction_code: str) -> List[ThresholdRule]:
        """Rules for a jurisdiction, highest tier first."""
        return list(self._rules.get(jurisdiction_code.upper(), []))

    @staticmethod
    def _matches(
        rule: ThresholdRule,
        emissions_tco2e: float,
        annual_revenue: Optional[float],
        employee_count: Optional[int],
    ) -> bool:
        values = {
            "emissions": emissions_tco2e,
            "revenue": annual_revenue,
            "employees": employee_count,
        }
        results = [
            values[dimension] is not None and values[dimension] >= threshold
            for dimension, threshold in rule.thresholds().items()
        ]
        return any(results) if rule.match == "any" else all(results)

    def classify(
        self,
        jurisdiction_code: str,
        total_emissions: float,
        annual_revenue: Optional[float] = None,
        employee_count: Optional[int] = None,
        as_of: Optional[date] = None,
    ) -> ComplianceClassification:
        """Classify an organization at a point in time.

        Args:
            jurisdiction_code: Normalized jurisdiction code.
            total_emissions: Inventory grand total in kgCO2e.
            annual_revenue: Annual revenue, if known.
            employee_count: Headcount, if known.
            as_of: Classification date (today if None).

        Returns:
            ComplianceClassification; group 0 when no rule in force matches.

        Raises:
            ValidationError: If total emissions are negative or not a number.
        """
        start = time.monotonic()
        if total_emissions is None or math.isnan(total_emissions) or total_emissions < 0:
            raise ValidationError(
                "Total emissions must be a non-negative number",
                component="ComplianceClassifier",
                invalid_fields={"total_emissions": repr(total_emissions)},
            )
        as_of = as_of or date.today()
        code = jurisdiction_code.upper()
        emissions_tco2e = total_emissions / KG_PER_TONNE

        matched: Optional[ThresholdRule] = None
        upcoming: List[UpcomingObligation] = []
        for rule in self._rules.get(code, []):
            if not self._matches(rule, emissions_tco2e, annual_revenue, employee_count):
                continue
            if rule.effective_date > as_of:
                if matched is None:
                    upcoming.append(UpcomingObligation(
                        mandatory_group=rule.group,
                        rule_label=rule.label,
                        effective_date=rule.effective_date,
                    ))
                continue
            if matched is None:
                matched = rule

        result = ComplianceClassification(
            jurisdiction_code=code,
            mandatory_group=matched.group if matched else 0,
            effective_date=matched.effective_date if matched else None,
            rule_label=matched.label if matched else None,
            as_of=as_of,
            upcoming=sorted(upcoming, key=lambda u: u.effective_date),
        )
        record_operation("classify", "success", time.monotonic() - start)
        logger.debug(
            "Classified %s at %.1f tCO2e as group %d",
            code, emissions_tco2e, result.mandatory_group,
        )
        return result


__all__ = ["ComplianceClassifier", "parse_rules", "KG_PER_TONNE"]
