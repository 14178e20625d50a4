"""Tests for industry benchmarking."""

import pytest

from carbonprospect.exceptions import ConfigurationError
from carbonprospect.footprint.benchmarks import IndustryBenchmarks, parse_benchmarks
from carbonprospect.footprint.models import EmissionsInventory, ScopeBreakdown


def _inventory(scope1, scope2, scope3):
    return EmissionsInventory(
        scope1=ScopeBreakdown(components={"stationary": scope1}, total=scope1),
        scope2=ScopeBreakdown(components={"electricity": scope2}, total=scope2),
        scope3=ScopeBreakdown(components={"businessTravel": scope3}, total=scope3),
        grand_total=scope1 + scope2 + scope3,
    )


def _entry(**overrides):
    entry = {
        "intensity_percentiles": {10: 1, 25: 2, 50: 3, 75: 4, 90: 5},
        "scope_share_median": {1: 10, 2: 20, 3: 70},
        "average_target_percent": 20,
        "leaders_target_percent": 40,
    }
    entry.update(overrides)
    return entry


class TestBenchmark:

    def test_office_intensity(self, benchmarks):
        # 400 t on $10M revenue is 40 t per $1M, the office median.
        result = benchmarks.benchmark("office", _inventory(0, 400_000, 0), 10_000_000, 30)

        assert result.available
        assert result.intensity_tco2e_per_million == pytest.approx(40.0)
        assert result.percentile_band == "better_than_median"
        assert result.industry_median_intensity == 40
        assert result.target_ambition == "average"
        assert result.warnings == []

    @pytest.mark.parametrize("tonnes,band", [
        (200, "top_10"),
        (250, "top_10"),
        (300, "top_25"),
        (500, "worse_than_median"),
        (700, "bottom_25"),
        (751, "bottom_10"),
    ])
    def test_percentile_bands(self, benchmarks, tonnes, band):
        result = benchmarks.benchmark(
            "office", _inventory(tonnes * 1000, 0, 0), 10_000_000,
        )
        assert result.percentile_band == band

    def test_scope_share_and_delta(self, benchmarks):
        result = benchmarks.benchmark(
            "office", _inventory(10_000, 30_000, 60_000), 10_000_000,
        )
        assert result.scope_share == pytest.approx({1: 10.0, 2: 30.0, 3: 60.0})
        assert result.scope_share_delta == pytest.approx({1: 6.0, 2: 2.0, 3: -8.0})

    @pytest.mark.parametrize("target,ambition", [
        (10, "below_average"),
        (30, "average"),
        (49.9, "average"),
        (50, "leader"),
        (80, "leader"),
    ])
    def test_target_ambition(self, benchmarks, target, ambition):
        result = benchmarks.benchmark("office", _inventory(1, 1, 1), 1_000_000, target)
        assert result.target_ambition == ambition

    def test_no_target(self, benchmarks):
        result = benchmarks.benchmark("office", _inventory(1, 1, 1), 1_000_000)
        assert result.target_ambition is None

    def test_missing_revenue(self, benchmarks):
        result = benchmarks.benchmark("office", _inventory(1, 1, 1), None, 30)
        assert result.available
        assert result.intensity_tco2e_per_million is None
        assert result.percentile_band is None
        assert any("revenue" in w for w in result.warnings)

    def test_empty_inventory(self, benchmarks):
        result = benchmarks.benchmark("office", EmissionsInventory.empty(), 1_000_000)
        assert result.scope_share == {}
        assert result.intensity_tco2e_per_million == 0
        assert result.percentile_band == "top_10"
        assert any("empty" in w for w in result.warnings)

    def test_unknown_industry(self, benchmarks, caplog):
        result = benchmarks.benchmark("mining", _inventory(1, 1, 1), 1_000_000, 30)
        assert result.available is False
        assert result.percentile_band is None
        assert result.warnings
        assert "mining" in caplog.text

    def test_industry_case_insensitive(self, benchmarks):
        result = benchmarks.benchmark("Office", _inventory(1, 1, 1), 1_000_000)
        assert result.available
        assert result.industry == "office"


class TestParsing:

    def test_default_industries(self, benchmarks):
        assert "office" in benchmarks.industries()
        assert len(benchmarks.industries()) == 8

    def test_valid_entry(self):
        parsed = parse_benchmarks({"industries": {"Mining": _entry()}})
        assert parsed[0].industry == "mining"

    def test_missing_percentile(self):
        with pytest.raises(ConfigurationError, match="percentiles"):
            parse_benchmarks({"industries": {"mining": _entry(
                intensity_percentiles={10: 1, 50: 3, 75: 4, 90: 5},
            )}})

    def test_decreasing_percentiles(self):
        with pytest.raises(ConfigurationError, match="non-decreasing"):
            parse_benchmarks({"industries": {"mining": _entry(
                intensity_percentiles={10: 5, 25: 2, 50: 3, 75: 4, 90: 5},
            )}})

    def test_missing_fields(self):
        with pytest.raises(ConfigurationError):
            parse_benchmarks({"industries": {"mining": {"source": "x"}}})

    def test_from_file(self, tmp_path):
        path = tmp_path / "benchmarks.json"
        path.write_text(
            '{"industries": {"mining": {"intensity_percentiles": '
            '{"10": 1, "25": 2, "50": 3, "75": 4, "90": 5}, '
            '"scope_share_median": {"1": 50, "2": 25, "3": 25}, '
            '"average_target_percent": 20, "leaders_target_percent": 40}}}'
        )
        loaded = IndustryBenchmarks.default(path)
        assert loaded.industries() == ["mining"]
        assert loaded.get("mining").intensity_percentiles[50] == 3
