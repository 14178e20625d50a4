"""Tests for the scenario payload codec and schema migrations."""

import json
import logging

import pytest

from carbonprospect.footprint.migrations import SCHEMA_VERSION, migrate
from carbonprospect.footprint.models import EmissionsInventory, ScenarioUpdate
from carbonprospect.footprint.payload import decode_payload, encode_payload, merge_payload

MALFORMED = "CP_SCENARIO_MALFORMED_SCENARIO_PAYLOAD"

LEGACY_DOCUMENT = {
    "reportingYear": "2023",
    "industryType": "office",
    "location": "Australia",
    "reductionTarget": 25,
    "annualRevenue": "5000000",
    "employeeCount": 40,
    "rawInputs": {"electricity": "1000", "diesel": 20},
    "emissions": {
        "scope1": {"mobile": 0.0536},
        "scope2": {"electricity": 0.79},
        "scope3": {"business_travel": 1.5, "total": 99},
    },
    "reductionStrategies": [
        {"strategy_id": "remote-work-policy", "name": "Remote Work Policy"},
        "paperless-office",
    ],
    "emissionValues": [1, 2, 3],
    "projectId": "abc",
}


class TestEncode:

    def test_deterministic(self):
        assert encode_payload({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_key_order_does_not_matter(self):
        assert encode_payload({"x": 1, "y": 2}) == encode_payload({"y": 2, "x": 1})


class TestDecode:

    def test_current_payload(self):
        text = encode_payload({
            "industry": "office",
            "reduction_target_percent": 30,
            "inventory": EmissionsInventory.empty().model_dump(mode="json"),
        })
        payload, warnings = decode_payload(text, SCHEMA_VERSION, "s1")

        assert warnings == []
        assert payload.industry == "office"
        assert payload.reduction_target_percent == 30
        assert payload.inventory.grand_total == 0

    @pytest.mark.parametrize("text", ["{not json", "[1, 2]", '"text"', "42"])
    def test_unreadable_payload_becomes_empty(self, text):
        payload, warnings = decode_payload(text, SCHEMA_VERSION, "s1")

        assert payload.to_fields() == {}
        assert len(warnings) == 1
        assert warnings[0]["code"] == MALFORMED
        assert warnings[0]["field"] is None
        assert "s1" in warnings[0]["message"]

    def test_empty_text_is_empty_payload(self):
        payload, warnings = decode_payload("", SCHEMA_VERSION)
        assert payload.to_fields() == {}
        assert warnings == []

    def test_invalid_field_dropped(self, caplog):
        text = encode_payload({
            "industry": "retail",
            "reduction_target_percent": 140,
            "employee_count": "many",
        })
        with caplog.at_level(logging.WARNING):
            payload, warnings = decode_payload(text, SCHEMA_VERSION, "s9")

        assert payload.industry == "retail"
        assert payload.reduction_target_percent is None
        assert payload.employee_count is None
        assert sorted(w["field"] for w in warnings) == [
            "employee_count", "reduction_target_percent",
        ]
        assert "reduction_target_percent" in caplog.text

    def test_unknown_field_dropped(self):
        payload, warnings = decode_payload(
            encode_payload({"industry": "retail", "colour": "green"}), SCHEMA_VERSION,
        )
        assert payload.to_fields() == {"industry": "retail"}
        assert [w["field"] for w in warnings] == ["colour"]
        assert "<unsaved>" in warnings[0]["message"]

    def test_malformed_inventory_dropped(self):
        text = encode_payload({"inventory": {"scope1": "lots"}, "notes": "kept"})
        payload, warnings = decode_payload(text, SCHEMA_VERSION)
        assert payload.inventory is None
        assert payload.notes == "kept"
        assert warnings[0]["field"] == "inventory"


class TestMerge:

    def test_empty_update_returns_stored_text(self):
        stored = '{"industry":"office",  "notes":"spacing kept"}'
        text, version = merge_payload(stored, 0, ScenarioUpdate())
        assert text == stored
        assert version == 0

    def test_merge_preserves_absent_fields(self):
        stored = encode_payload({"industry": "office", "notes": "a"})
        text, version = merge_payload(stored, SCHEMA_VERSION, ScenarioUpdate(notes="b"))

        assert json.loads(text) == {"industry": "office", "notes": "b"}
        assert version == SCHEMA_VERSION

    def test_explicit_none_overwrites(self):
        stored = encode_payload({"industry": "office", "notes": "a"})
        text, _ = merge_payload(stored, SCHEMA_VERSION, ScenarioUpdate(notes=None))
        assert json.loads(text) == {"industry": "office", "notes": None}

    def test_merge_upgrades_legacy_payload(self):
        stored = json.dumps({"industryType": "retail", "location": "USA"})
        text, version = merge_payload(stored, 0, ScenarioUpdate(notes="x"))

        assert version == SCHEMA_VERSION
        assert json.loads(text) == {
            "industry": "retail", "jurisdiction_code": "US", "notes": "x",
        }

    def test_merge_replaces_unreadable_payload(self):
        text, version = merge_payload("{broken", SCHEMA_VERSION, ScenarioUpdate(notes="x"))
        assert json.loads(text) == {"notes": "x"}


class TestLegacyMigration:

    def test_v0_document(self):
        data = migrate(dict(LEGACY_DOCUMENT), 0)

        assert data["reporting_year"] == 2023
        assert data["industry"] == "office"
        assert data["jurisdiction_code"] == "AU"
        assert data["reduction_target_percent"] == 25
        assert data["annual_revenue"] == 5_000_000
        assert data["employee_count"] == 40
        assert data["inputs"] == {"electricity": 1000.0, "diesel": 20}
        assert data["selected_strategies"] == ["remote-work-policy", "paperless-office"]
        assert "emissionValues" not in data
        assert "projectId" not in data

    def test_v0_emissions_converted_to_kilograms(self):
        inventory = migrate(dict(LEGACY_DOCUMENT), 0)["inventory"]

        assert inventory["scope1"]["components"]["mobile"] == pytest.approx(53.6)
        assert inventory["scope2"]["total"] == pytest.approx(790.0)
        assert inventory["scope3"]["components"]["businessTravel"] == pytest.approx(1500.0)
        assert inventory["scope3"]["total"] == pytest.approx(1500.0)
        assert inventory["grand_total"] == pytest.approx(53.6 + 790.0 + 1500.0)

    def test_v0_document_decodes_cleanly(self):
        payload, warnings = decode_payload(json.dumps(LEGACY_DOCUMENT), 0, "legacy")

        assert warnings == []
        assert payload.jurisdiction_code == "AU"
        assert payload.inventory.unit == "kgCO2e"
        assert payload.inventory.scope2.components["electricity"] == pytest.approx(790.0)

    def test_newer_version_left_unchanged(self, caplog):
        data = {"industry": "office", "future_field": 1}
        assert migrate(dict(data), SCHEMA_VERSION + 1) == data
        assert "newer" in caplog.text

    def test_current_version_is_noop(self):
        data = {"industry": "office"}
        assert migrate(dict(data), SCHEMA_VERSION) == data

    def test_unparseable_legacy_emissions_dropped_on_read(self):
        document = {"industryType": "office", "emissions": {"scope1": {"mobile": "n/a"}}}
        payload, warnings = decode_payload(json.dumps(document), 0)
        assert payload.industry == "office"
        assert payload.inventory is None
        assert [w["field"] for w in warnings] == ["inventory"]

    @pytest.mark.parametrize("text, field", [
        ('{"reportingYear": NaN, "industryType": "office"}', "reporting_year"),
        ('{"reportingYear": "inf", "industryType": "office"}', "reporting_year"),
        ('{"employeeCount": "inf", "industryType": "office"}', "employee_count"),
        ('{"employeeCount": 1.5, "industryType": "office"}', "employee_count"),
    ])
    def test_non_whole_legacy_counts_dropped_on_read(self, text, field):
        payload, warnings = decode_payload(text, 0)

        assert payload.industry == "office"
        assert getattr(payload, field) is None
        assert [w["field"] for w in warnings] == [field]
        assert warnings[0]["code"] == MALFORMED

    def test_whole_float_legacy_counts_become_integers(self):
        data = migrate({"reportingYear": 2024.0, "employeeCount": "12"}, 0)
        assert data["reporting_year"] == 2024
        assert data["employee_count"] == 12
        assert isinstance(data["employee_count"], int)


class TestUnknownSchemaVersion:

    def test_migrate_rejects_negative_version(self):
        with pytest.raises(ValueError):
            migrate({"industry": "office"}, -1)

    def test_decode_recovers_empty_payload(self, caplog):
        with caplog.at_level(logging.WARNING):
            payload, warnings = decode_payload('{"industry": "office"}', -1, "sc-9")

        assert payload.to_fields() == {}
        assert len(warnings) == 1
        assert warnings[0]["code"] == MALFORMED
        assert "sc-9" in caplog.text

    def test_merge_replaces_payload(self):
        text, version = merge_payload('{"industry": "office"}', -3, ScenarioUpdate(notes="n"))

        assert version == SCHEMA_VERSION
        assert json.loads(text) == {"notes": "n"}
