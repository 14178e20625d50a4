"""Tests for free-form jurisdiction normalization."""

import pytest

from carbonprospect.footprint.jurisdictions import jurisdiction_name, normalize_jurisdiction


class TestNormalizeJurisdiction:

    @pytest.mark.parametrize("name, code", [
        ("Australia", "AU"),
        ("australia", "AU"),
        ("united_states", "US"),
        ("United States", "US"),
        ("USA", "US"),
        ("uk", "GB"),
        ("Great  Britain", "GB"),
        ("european-union", "EU"),
        ("newzealand", "NZ"),
        ("New Zealand", "NZ"),
        ("Korea", "KR"),
        ("  jp ", "JP"),
    ])
    def test_aliases(self, name, code):
        assert normalize_jurisdiction(name) == code

    @pytest.mark.parametrize("name", ["Atlantis", "", None, "xx"])
    def test_unrecognized_is_global(self, name):
        assert normalize_jurisdiction(name) == "GLOBAL"

    def test_display_name(self):
        assert jurisdiction_name("AU") == "Australia"
        assert jurisdiction_name("ZZ") == "ZZ"
