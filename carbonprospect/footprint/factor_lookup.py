# -*- coding: utf-8 -*-
"""
Emission Factor Lookup

Resolves the emission factor for an activity category, jurisdiction and
reporting year against an immutable factor table.

Resolution order:
    1. Exact (category, jurisdiction, year)
    2. (category, GLOBAL, year)
    3. FactorNotFound

Falling back to GLOBAL is the normal path for categories that have no
jurisdiction-specific value; it is logged at DEBUG and counted, never
reported as missing data.

Example:
    >>> from carbonprospect.footprint.factor_lookup import FactorLookup
    >>> lookup = FactorLookup.default()
    >>> lookup.resolve("electricity", "AU", 2024).value_per_unit
    0.79
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from carbonprospect.exceptions import ConfigurationError, FactorNotFound
from carbonprospect.footprint.metrics import record_factor_resolution
from carbonprospect.footprint.models import GLOBAL_JURISDICTION, EmissionFactor
from carbonprospect.footprint.reference_data import (
    EMISSION_FACTORS_FILE,
    load_document,
    resolve_path,
)

logger = logging.getLogger(__name__)

FactorKey = Tuple[str, str, int]


def expand_factor_rows(document: Mapping[str, Any]) -> List[EmissionFactor]:
    """Expand the compact YAML layout into one EmissionFactor per row.

    Each entry under ``factors`` lists ``values`` by jurisdiction and
    applies to every year in its own ``years`` list or, failing that, the
    document-level ``years``.

    Raises:
        ConfigurationError: If an entry is malformed.
    """
    default_years = document.get("years") or []
    rows: List[EmissionFactor] = []
    for index, entry in enumerate(document.get("factors") or []):
        if not isinstance(entry, dict) or "category" not in entry:
            raise ConfigurationError(
                f"Factor entry #{index} must be a mapping with a category",
                component="FactorLookup",
            )
        years = entry.get("years") or default_years
        if not years:
            raise ConfigurationError(
                f"Factor entry '{entry['category']}' has no years",
                component="FactorLookup",
            )
        for jurisdiction, value in (entry.get("values") or {}).items():
            code = str(jurisdiction).upper()
            for year in years:
                try:
                    rows.append(EmissionFactor(
                        category=entry["category"],
                        jurisdiction_code=code,
                        year=int(year),
                        value_per_unit=value,
                        unit=entry.get("unit", ""),
                        is_default=(code == GLOBAL_JURISDICTION),
                        source=entry.get("source", ""),
                    ))
                except PydanticValidationError as exc:
                    raise ConfigurationError(
                        f"Invalid factor {entry['category']}/{code}/{year}: {exc}",
                        component="FactorLookup",
                    ) from exc
    return rows


class FactorLookup:
    """Indexed, read-only emission factor table.

    Attributes:
        _factors: Factors keyed by (category, jurisdiction_code, year).
    """

    def __init__(self, factors: Iterable[EmissionFactor]) -> None:
        """Index the factor rows, enforcing the table invariants.

        Args:
            factors: Factor rows.

        Raises:
            ConfigurationError: On duplicate (category, jurisdiction, year)
                rows, more than one default per (category, year), or a
                default row outside the GLOBAL jurisdiction.
        """
        self._factors: Dict[FactorKey, EmissionFactor] = {}
        defaults: Dict[Tuple[str, int], EmissionFactor] = {}

        for factor in factors:
            key = (factor.category, factor.jurisdiction_code, factor.year)
            if key in self._factors:
                raise ConfigurationError(
                    "Duplicate emission factor for %s/%s/%d" % key,
                    component="FactorLookup",
                    context={"key": list(key)},
                )
            if factor.is_default:
                if factor.jurisdiction_code != GLOBAL_JURISDICTION:
                    raise ConfigurationError(
                        f"Default factor for {factor.category}/{factor.year} "
                        f"must be GLOBAL, not {factor.jurisdiction_code}",
                        component="FactorLookup",
                    )
                default_key = (factor.category, factor.year)
                if default_key in defaults:
                    raise ConfigurationError(
                        "More than one default factor for %s/%d" % default_key,
                        component="FactorLookup",
                    )
                defaults[default_key] = factor
            self._factors[key] = factor

        logger.info(
            "FactorLookup initialized with %d factors across %d categories",
            len(self._factors), len(self.categories()),
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> FactorLookup:
        """Build a lookup from a JSON or YAML factor document."""
        return cls(expand_factor_rows(load_document(path)))

    @classmethod
    def default(cls, path: Optional[Union[str, Path]] = None) -> FactorLookup:
        """Build a lookup from the packaged table, or ``path`` if given."""
        return cls.from_file(resolve_path(path, EMISSION_FACTORS_FILE))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def resolve(self, category: str, jurisdiction_code: str, year: int) -> EmissionFactor:
        """Resolve the factor for a category, jurisdiction and year.

        Args:
            category: Factor category.
            jurisdiction_code: Normalized jurisdiction code.
            year: Reporting year.

        Returns:
            The jurisdiction-specific factor if one exists, else the GLOBAL one.

        Raises:
            FactorNotFound: If neither exists.
        """
        code = jurisdiction_code.upper()
        factor = self._factors.get((category, code, year))
        if factor is not None:
            record_factor_resolution("jurisdiction")
            return factor

        factor = self._factors.get((category, GLOBAL_JURISDICTION, year))
        if factor is not None:
            if code != GLOBAL_JURISDICTION:
                logger.debug(
                    "No %s factor for %s/%d, using GLOBAL default %s",
                    category, code, year, factor.value_per_unit,
                )
                record_factor_resolution("global")
            else:
                record_factor_resolution("jurisdiction")
            return factor

        record_factor_resolution("missing")
        raise FactorNotFound(category, code, year)

    def categories(self) -> List[str]:
        return sorted({key[0] for key in self._factors})

    def years(self) -> List[int]:
        return sorted({key[2] for key in self._factors})

    def list_factors(
        self,
        jurisdiction_code: Optional[str] = None,
        year: Optional[int] = None,
        category: Optional[str] = None,
    ) -> List[EmissionFactor]:
        """List factor rows, optionally filtered.

        Returns:
            Matching rows sorted by category, jurisdiction and year.
        """
        rows = [
            f for f in self._factors.values()
            if (jurisdiction_code is None or f.jurisdiction_code == jurisdiction_code.upper())
            and (year is None or f.year == year)
            and (category is None or f.category == category)
        ]
        return sorted(rows, key=lambda f: (f.category, f.jurisdiction_code, f.year))

    def __len__(self) -> int:
        return len(self._factors)

    def __contains__(self, key: object) -> bool:
        return key in self._factors


__all__ = ["FactorLookup", "expand_factor_rows"]
