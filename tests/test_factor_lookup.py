"""Tests for emission factor resolution and table invariants."""

import logging

import pytest

from carbonprospect.exceptions import ConfigurationError, FactorNotFound
from carbonprospect.footprint.factor_lookup import FactorLookup, expand_factor_rows
from carbonprospect.footprint.models import EmissionFactor


def _factor(category="electricity", code="GLOBAL", year=2024, value=0.5, default=None):
    return EmissionFactor(
        category=category, jurisdiction_code=code, year=year,
        value_per_unit=value, unit="kWh",
        is_default=(code == "GLOBAL") if default is None else default,
    )


class TestResolve:
    """Resolution order: exact, then GLOBAL, then FactorNotFound."""

    def test_exact_match_wins(self, small_lookup):
        factor = small_lookup.resolve("electricity", "AU", 2024)
        assert factor.value_per_unit == 0.8
        assert factor.jurisdiction_code == "AU"

    def test_lowercase_code_accepted(self, small_lookup):
        assert small_lookup.resolve("electricity", "au", 2024).value_per_unit == 0.8

    def test_global_fallback_is_silent(self, small_lookup, caplog):
        with caplog.at_level(logging.WARNING):
            factor = small_lookup.resolve("diesel", "AU", 2024)

        assert factor.jurisdiction_code == "GLOBAL"
        assert factor.value_per_unit == 2.68
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_fallback_logged_at_debug(self, small_lookup, caplog):
        with caplog.at_level(logging.DEBUG, logger="carbonprospect.footprint.factor_lookup"):
            small_lookup.resolve("diesel", "US", 2024)
        assert any("GLOBAL" in r.getMessage() for r in caplog.records)

    def test_missing_year_raises(self, small_lookup):
        with pytest.raises(FactorNotFound) as exc_info:
            small_lookup.resolve("electricity", "AU", 1999)
        assert exc_info.value.year == 1999

    def test_missing_category_raises(self, small_lookup):
        with pytest.raises(FactorNotFound):
            small_lookup.resolve("steamPurchased", "AU", 2024)


class TestInvariants:

    def test_duplicate_key_rejected(self):
        with pytest.raises(ConfigurationError, match="Duplicate"):
            FactorLookup([_factor(code="AU", value=0.8), _factor(code="AU", value=0.9)])

    def test_default_must_be_global(self):
        with pytest.raises(ConfigurationError, match="must be GLOBAL"):
            FactorLookup([_factor(code="AU", default=True)])

    def test_negative_value_rejected(self):
        with pytest.raises(Exception):
            _factor(value=-1.0)

    def test_factors_are_immutable(self):
        factor = _factor()
        with pytest.raises(Exception):
            factor.value_per_unit = 1.0


class TestPackagedTable:

    def test_au_grid_factor(self, factor_lookup):
        assert factor_lookup.resolve("electricity", "AU", 2024).value_per_unit == 0.79

    def test_every_category_has_a_global_default(self, factor_lookup):
        for category in factor_lookup.categories():
            for year in factor_lookup.years():
                assert factor_lookup.resolve(category, "GLOBAL", year).is_default

    def test_list_factors_filters(self, factor_lookup):
        rows = factor_lookup.list_factors(jurisdiction_code="au", year=2024)
        assert [r.category for r in rows] == ["electricity"]
        assert len(factor_lookup) > 100


class TestExpandRows:

    def test_expands_years_and_jurisdictions(self):
        rows = expand_factor_rows({
            "years": [2023, 2024],
            "factors": [{"category": "diesel", "unit": "litre",
                         "values": {"GLOBAL": 2.68, "au": 2.7}}],
        })
        assert len(rows) == 4
        assert {r.jurisdiction_code for r in rows} == {"GLOBAL", "AU"}
        assert all(r.is_default == (r.jurisdiction_code == "GLOBAL") for r in rows)

    def test_entry_years_override_document_years(self):
        rows = expand_factor_rows({
            "years": [2023],
            "factors": [{"category": "diesel", "years": [2030], "values": {"GLOBAL": 1}}],
        })
        assert [r.year for r in rows] == [2030]

    def test_entry_without_years_rejected(self):
        with pytest.raises(ConfigurationError):
            expand_factor_rows({"factors": [{"category": "diesel", "values": {"GLOBAL": 1}}]})

    def test_from_file_yaml(self, tmp_path):
        path = tmp_path / "factors.yaml"
        path.write_text(
            "years: [2024]\nfactors:\n  - category: electricity\n"
            "    unit: kWh\n    values: {GLOBAL: 0.5, AU: 0.8}\n",
            encoding="utf-8",
        )
        lookup = FactorLookup.from_file(path)
        assert lookup.resolve("electricity", "AU", 2024).value_per_unit == 0.8

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "factors.txt"
        path.write_text("x", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Unsupported"):
            FactorLookup.from_file(path)
