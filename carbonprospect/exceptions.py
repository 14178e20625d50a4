# -*- coding: utf-8 -*-
"""CarbonProspect Exception Hierarchy.

Every error raised by the footprint engine carries structured context for
logging, API responses and user feedback.

Exception Hierarchy:
    CarbonProspectException (base)
    ├── ReferenceDataException
    │   ├── FactorNotFound
    │   └── ConfigurationError
    ├── ValidationError
    │   ├── UnknownCategory
    │   ├── InvalidActivityQuantity
    │   ├── InvalidDiscountRate
    │   ├── InvalidProjectionHorizon
    │   └── InvalidComparisonSize
    └── ScenarioException
        ├── StrategyNotFound
        ├── ScenarioNotFound
        ├── CapacityExceeded
        └── MalformedScenarioPayload

All exceptions include:
- error_code: Stable error identifier (e.g. "CP_DATA_FACTOR_NOT_FOUND")
- component: Name of the engine component that raised the error
- context: Dictionary with error-specific details
- timestamp: When the error occurred (UTC)

Example:
    >>> from carbonprospect.exceptions import FactorNotFound
    >>> raise FactorNotFound(
    ...     category="electricity",
    ...     jurisdiction_code="AU",
    ...     year=2024,
    ... )
"""

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence


# ==============================================================================
# Base Exception
# ==============================================================================

class CarbonProspectException(Exception):
    """Base exception for all CarbonProspect errors.

    Attributes:
        message: Human-readable error message
        error_code: Stable error identifier
        component: Engine component that raised the error (optional)
        context: Dictionary with error-specific details
        timestamp: When the error occurred
    """

    ERROR_PREFIX = "CP"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        component: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.component = component
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    def _generate_error_code(self) -> str:
        """Derive the error code from the class name.

        Returns:
            Error code like "CP_VALIDATION_UNKNOWN_CATEGORY"
        """
        error_type = re.sub(r"(?<!^)(?=[A-Z])", "_", self.__class__.__name__).upper()
        return f"{self.ERROR_PREFIX}_{error_type}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization.

        Returns:
            Dictionary with all error details
        """
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "component": self.component,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def __str__(self) -> str:
        parts = [f"[{self.error_code}]"]
        if self.component:
            parts.append(f"Component: {self.component}")
        parts.append(self.message)
        return " - ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"component='{self.component}')"
        )


# ==============================================================================
# Reference Data Exceptions
# ==============================================================================

class ReferenceDataException(CarbonProspectException):
    """Base exception for emission factor and rule table problems."""
    ERROR_PREFIX = "CP_DATA"


class FactorNotFound(ReferenceDataException):
    """No emission factor exists for a category, even in the GLOBAL table.

    Example:
        >>> raise FactorNotFound("electricity", "AU", 1990)
    """

    def __init__(self, category: str, jurisdiction_code: str, year: int):
        super().__init__(
            message=(
                f"No emission factor for category '{category}' in "
                f"{jurisdiction_code} or GLOBAL for year {year}"
            ),
            component="FactorLookup",
            context={
                "category": category,
                "jurisdiction_code": jurisdiction_code,
                "year": year,
            },
        )
        self.category = category
        self.jurisdiction_code = jurisdiction_code
        self.year = year


class ConfigurationError(ReferenceDataException):
    """Reference data or configuration is inconsistent.

    Raised by the loaders when a table violates its invariants, for
    example two default factors for the same category and year.
    """

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
    ):
        if source:
            context = context or {}
            context["source"] = source
        super().__init__(message, component=component, context=context)


# ==============================================================================
# Validation Exceptions
# ==============================================================================

class ValidationError(CarbonProspectException):
    """Caller-supplied input failed a precondition.

    Example:
        >>> raise ValidationError(
        ...     message="Reduction target must be between 0 and 100",
        ...     invalid_fields={"reduction_target_percent": "got 140"},
        ... )
    """
    ERROR_PREFIX = "CP_VALIDATION"

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        invalid_fields: Optional[Dict[str, str]] = None,
    ):
        if invalid_fields:
            context = context or {}
            context["invalid_fields"] = invalid_fields
        super().__init__(message, component=component, context=context)
        self.invalid_fields = invalid_fields or {}


class UnknownCategory(ValidationError):
    """Activity inputs contain categories the aggregator does not know."""

    def __init__(self, categories: Sequence[str], known: Sequence[str]):
        self.categories: List[str] = sorted(categories)
        super().__init__(
            message=f"Unknown activity categories: {', '.join(self.categories)}",
            component="ScopeAggregator",
            context={"unknown": self.categories, "known": sorted(known)},
        )


class InvalidActivityQuantity(ValidationError):
    """An activity quantity is negative, NaN or not a number."""

    def __init__(self, category: str, value: Any):
        super().__init__(
            message=(
                f"Activity quantity for '{category}' must be a finite, "
                f"non-negative number (got {value!r})"
            ),
            component="ScopeAggregator",
            invalid_fields={category: repr(value)},
        )
        self.category = category
        self.value = value


class InvalidDiscountRate(ValidationError):
    """Discount rate is negative or not a number."""

    def __init__(self, discount_rate: Any):
        super().__init__(
            message=f"Discount rate must be >= 0 (got {discount_rate!r})",
            component="FinancialProjector",
            invalid_fields={"discount_rate": repr(discount_rate)},
        )
        self.discount_rate = discount_rate


class InvalidProjectionHorizon(ValidationError):
    """Projection horizon is outside the supported range."""

    def __init__(self, horizon_years: Any, max_horizon_years: int):
        super().__init__(
            message=(
                f"Projection horizon must be between 1 and {max_horizon_years} "
                f"years (got {horizon_years!r})"
            ),
            component="FinancialProjector",
            invalid_fields={"horizon_years": repr(horizon_years)},
        )
        self.horizon_years = horizon_years


class InvalidComparisonSize(ValidationError):
    """A comparison was requested for fewer than 2 or more than 3 scenarios."""

    def __init__(self, count: int, minimum: int = 2, maximum: int = 3):
        super().__init__(
            message=(
                f"Comparison needs between {minimum} and {maximum} scenarios "
                f"(got {count})"
            ),
            component="ScenarioComparator",
            context={"count": count, "minimum": minimum, "maximum": maximum},
        )
        self.count = count


# ==============================================================================
# Scenario Exceptions
# ==============================================================================

class ScenarioException(CarbonProspectException):
    """Base exception for scenario persistence and strategy selection."""
    ERROR_PREFIX = "CP_SCENARIO"


class StrategyNotFound(ScenarioException):
    """A selected strategy id does not exist for the organization's industry."""

    def __init__(self, strategy_id: str, industry: str):
        super().__init__(
            message=f"Strategy '{strategy_id}' not found for industry '{industry}'",
            component="StrategyCatalog",
            context={"strategy_id": strategy_id, "industry": industry},
        )
        self.strategy_id = strategy_id
        self.industry = industry


class ScenarioNotFound(ScenarioException):
    """No scenario exists with the given id."""

    def __init__(self, scenario_id: str):
        super().__init__(
            message=f"Scenario '{scenario_id}' not found",
            component="ScenarioStore",
            context={"scenario_id": scenario_id},
        )
        self.scenario_id = scenario_id


class CapacityExceeded(ScenarioException):
    """A footprint already holds the maximum number of scenarios."""

    def __init__(self, footprint_id: str, limit: int):
        super().__init__(
            message=f"Footprint '{footprint_id}' already holds {limit} scenarios",
            component="ScenarioStore",
            context={"footprint_id": footprint_id, "limit": limit},
        )


class MalformedScenarioPayload(ScenarioException):
    """A stored scenario payload could not be read as written.

    The store never raises this to its callers. It recovers the payload
    and attaches ``to_warning()`` to the returned scenario.
    """

    def __init__(
        self,
        scenario_id: Optional[str],
        reason: str,
        field: Optional[str] = None,
    ):
        target = f"field '{field}'" if field else "payload"
        super().__init__(
            message=f"Scenario {scenario_id or '<unsaved>'}: {target} discarded ({reason})",
            component="ScenarioPayload",
            context={"scenario_id": scenario_id, "field": field, "reason": reason},
        )
        self.field = field
        self.reason = reason

    def to_warning(self) -> Dict[str, Any]:
        """Structured warning record attached to the recovered scenario."""
        return {
            "code": self.error_code,
            "field": self.field,
            "message": self.message,
        }


# ==============================================================================
# Exception Utilities
# ==============================================================================

def format_exception_chain(exc: BaseException) -> str:
    """Format exception chain for logging/display.

    Args:
        exc: Exception to format

    Returns:
        Formatted string with the full ``__cause__`` chain
    """
    lines = []
    current: Optional[BaseException] = exc
    while current is not None:
        if isinstance(current, CarbonProspectException):
            lines.append(str(current))
            lines.append(f"  Context: {current.context}")
        else:
            lines.append(f"{type(current).__name__}: {current}")
        current = current.__cause__
    return "\n".join(lines)


def is_recoverable(exc: BaseException) -> bool:
    """Check whether an error is a data-quality issue the engine can degrade past.

    Args:
        exc: Exception to check

    Returns:
        True for malformed stored payloads, False for everything else
    """
    return isinstance(exc, MalformedScenarioPayload)


__all__ = [
    "CarbonProspectException",
    "ReferenceDataException",
    "FactorNotFound",
    "ConfigurationError",
    "ValidationError",
    "UnknownCategory",
    "InvalidActivityQuantity",
    "InvalidDiscountRate",
    "InvalidProjectionHorizon",
    "InvalidComparisonSize",
    "ScenarioException",
    "StrategyNotFound",
    "ScenarioNotFound",
    "CapacityExceeded",
    "MalformedScenarioPayload",
    "format_exception_chain",
    "is_recoverable",
]
