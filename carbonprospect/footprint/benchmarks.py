# -*- coding: utf-8 -*-
"""
Industry Benchmarking

Positions an organization's emission intensity, scope mix and reduction
target within its industry's distribution. An unknown industry yields an
unavailable result, and missing revenue or an empty inventory leave the
affected metrics unset. Each case adds a warning instead of raising.

Example:
    >>> benchmarks = IndustryBenchmarks.default()
    >>> result = benchmarks.benchmark("office", inventory, 10_000_000, 30)
    >>> result.percentile_band, result.target_ambition
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from carbonprospect.exceptions import ConfigurationError
from carbonprospect.footprint.models import (
    BenchmarkResult,
    EmissionsInventory,
    IndustryBenchmark,
)
from carbonprospect.footprint.reference_data import (
    INDUSTRY_BENCHMARKS_FILE,
    load_document,
    resolve_path,
)

logger = logging.getLogger(__name__)

PERCENTILES = (10, 25, 50, 75, 90)

# Lower intensity is better, so the 10th percentile is the top band.
_BANDS = (
    (10, "top_10"),
    (25, "top_25"),
    (50, "better_than_median"),
    (75, "worse_than_median"),
    (90, "bottom_25"),
)
_LAST_BAND = "bottom_10"


def parse_benchmarks(document: Mapping[str, Any]) -> List[IndustryBenchmark]:
    benchmarks: List[IndustryBenchmark] = []
    for industry, entry in (document.get("industries") or {}).items():
        try:
            benchmark = IndustryBenchmark(industry=str(industry).lower(), **entry)
        except (PydanticValidationError, TypeError) as exc:
            raise ConfigurationError(
                f"Invalid benchmark for '{industry}': {exc}",
                component="IndustryBenchmarks",
            ) from exc
        if sorted(benchmark.intensity_percentiles) != list(PERCENTILES):
            raise ConfigurationError(
                f"Benchmark for '{industry}' must define percentiles {PERCENTILES}",
                component="IndustryBenchmarks",
            )
        values = [benchmark.intensity_percentiles[p] for p in PERCENTILES]
        if values != sorted(values):
            raise ConfigurationError(
                f"Benchmark percentiles for '{industry}' must be non-decreasing",
                component="IndustryBenchmarks",
            )
        benchmarks.append(benchmark)
    return benchmarks


class IndustryBenchmarks:
    """Industry distribution lookups."""

    def __init__(self, benchmarks: Iterable[IndustryBenchmark]) -> None:
        self._benchmarks: Dict[str, IndustryBenchmark] = {
            b.industry: b for b in benchmarks
        }
        logger.info(
            "IndustryBenchmarks initialized for %d industries", len(self._benchmarks),
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> IndustryBenchmarks:
        return cls(parse_benchmarks(load_document(path)))

    @classmethod
    def default(cls, path: Optional[Union[str, Path]] = None) -> IndustryBenchmarks:
        return cls.from_file(resolve_path(path, INDUSTRY_BENCHMARKS_FILE))

    def industries(self) -> List[str]:
        return sorted(self._benchmarks)

    def get(self, industry: str) -> Optional[IndustryBenchmark]:
        return self._benchmarks.get(industry.lower())

    @staticmethod
    def percentile_band(intensity: float, benchmark: IndustryBenchmark) -> str:
        """Name the band an intensity falls into (inclusive upper bounds)."""
        for percentile, band in _BANDS:
            if intensity <= benchmark.intensity_percentiles[percentile]:
                return band
        return _LAST_BAND

    def benchmark(
        self,
        industry: str,
        inventory: EmissionsInventory,
        annual_revenue: Optional[float],
        reduction_target_percent: Optional[float] = None,
    ) -> BenchmarkResult:
        """Compare an inventory against its industry distribution.

        Args:
            industry: Industry key.
            inventory: Emissions inventory in kgCO2e.
            annual_revenue: Annual revenue in USD; intensity needs it.
            reduction_target_percent: Organization's target, if set.

        Returns:
            BenchmarkResult; ``available`` is False when the industry has
            no benchmark.
        """
        benchmark = self.get(industry)
        if benchmark is None:
            message = f"No benchmark data for industry '{industry}'"
            logger.warning("No benchmark data for industry %r", industry)
            return BenchmarkResult(industry=industry, available=False, warnings=[message])

        warnings: List[str] = []
        result: Dict[str, Any] = {
            "industry": benchmark.industry,
            "industry_median_intensity": benchmark.intensity_percentiles[50],
        }

        if annual_revenue:
            intensity = (inventory.grand_total / 1000.0) / (annual_revenue / 1_000_000.0)
            result["intensity_tco2e_per_million"] = intensity
            result["percentile_band"] = self.percentile_band(intensity, benchmark)
        else:
            warnings.append("Annual revenue is required for intensity benchmarking")

        if inventory.grand_total > 0:
            shares = {
                scope: total / inventory.grand_total * 100.0
                for scope, total in inventory.scope_totals().items()
            }
            result["scope_share"] = shares
            result["scope_share_delta"] = {
                scope: shares[scope] - benchmark.scope_share_median.get(scope, 0.0)
                for scope in shares
            }
        else:
            warnings.append("Inventory is empty; scope mix not benchmarked")

        if reduction_target_percent is not None:
            if reduction_target_percent >= benchmark.leaders_target_percent:
                result["target_ambition"] = "leader"
            elif reduction_target_percent >= benchmark.average_target_percent:
                result["target_ambition"] = "average"
            else:
                result["target_ambition"] = "below_average"

        return BenchmarkResult(warnings=warnings, **result)


__all__ = ["IndustryBenchmarks", "parse_benchmarks", "PERCENTILES"]
