"""
Rule engine tests: emptiness, rule order, field selection, custom validators.
"""
import math
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from django.core.exceptions import ImproperlyConfigured

from formcore.validation import (
    EMAIL_RE,
    Err,
    FieldRule,
    Ok,
    SchemaValidationError,
    create_validation_schema,
    is_empty_value,
)
from formcore.validation.rules import COMMON_RULES

EMPTY_VALUES = [None, "", "   ", [], {}]


@pytest.fixture
def email_schema():
    return create_validation_schema({"email": COMMON_RULES["email"]})


class TestEmailScenarios:
    def test_empty_email_is_required(self, email_schema):
        result = email_schema.validate({"email": ""})
        assert result.is_valid is False
        assert result.errors == {"email": "E-Mail ist erforderlich"}

    def test_malformed_email_fails_pattern(self, email_schema):
        result = email_schema.validate({"email": "not-an-email"})
        assert result.is_valid is False
        assert result.errors == {"email": "Bitte geben Sie eine gültige E-Mail-Adresse ein"}

    def test_valid_email_passes(self, email_schema):
        result = email_schema.validate({"email": "a@b.de"})
        assert result.is_valid is True
        assert result.errors == {}


class TestEmptiness:
    @pytest.mark.parametrize("value", EMPTY_VALUES)
    def test_is_empty_value(self, value):
        assert is_empty_value(value) is True

    @pytest.mark.parametrize("value", [0, False, "x", [0], {"a": 1}, date(2024, 1, 1)])
    def test_non_empty_values(self, value):
        assert is_empty_value(value) is False

    @pytest.mark.parametrize("value", EMPTY_VALUES)
    def test_required_empty_value_skips_other_rules(self, value):
        custom = MagicMock(return_value=True)
        schema = create_validation_schema({
            "kunde": FieldRule(
                required=True,
                type="string",
                min_length=5,
                pattern=r"^\d+$",
                validate=custom,
                error_messages={"required": "Kundenname ist erforderlich"},
            ),
        })

        result = schema.validate({"kunde": value})

        assert result.is_valid is False
        assert result.errors == {"kunde": "Kundenname ist erforderlich"}
        custom.assert_not_called()

    @pytest.mark.parametrize("value", EMPTY_VALUES)
    def test_optional_empty_value_passes(self, value):
        schema = create_validation_schema({
            "telefon": FieldRule(type="number", min_value=10, pattern=r"^\d+$", min_length=3),
        })
        assert schema.validate({"telefon": value}).is_valid is True

    def test_missing_nested_value_is_required(self):
        schema = create_validation_schema({"einzugsadresse.plz": COMMON_RULES["postal_code"]})
        result = schema.validate({"einzugsadresse": {}})
        assert result.errors == {"einzugsadresse.plz": "PLZ ist erforderlich"}

    def test_default_required_message_uses_field_path(self):
        schema = create_validation_schema({"auszugsadresse.ort": {"required": True}})
        result = schema.validate({})
        assert result.errors == {"auszugsadresse.ort": "auszugsadresse.ort ist erforderlich"}


class TestRuleOrder:
    def test_type_failure_wins_over_bounds(self):
        schema = create_validation_schema({"anzahl": FieldRule(type="number", min_length=10)})
        assert schema.validate({"anzahl": "drei"}).errors == {"anzahl": "anzahl hat einen ungültigen Typ"}

    def test_numeric_bounds_are_inclusive(self):
        schema = create_validation_schema({"anzahl": FieldRule(min_value=1, max_value=10)})
        assert schema.validate({"anzahl": 1}).is_valid
        assert schema.validate({"anzahl": 10}).is_valid
        assert schema.validate({"anzahl": 0}).errors == {"anzahl": "anzahl muss mindestens 1 sein"}
        assert schema.validate({"anzahl": 11}).errors == {"anzahl": "anzahl darf maximal 10 sein"}

    def test_numeric_bounds_only_apply_to_numbers(self):
        schema = create_validation_schema({"anzahl": FieldRule(min_value=5)})
        assert schema.validate({"anzahl": "1"}).is_valid

    def test_decimal_values_are_numbers(self):
        schema = create_validation_schema({"preis": FieldRule(type="number", min_value=0)})
        assert schema.validate({"preis": Decimal("19.99")}).is_valid
        assert schema.validate({"preis": Decimal("-1")}).errors == {"preis": "preis muss mindestens 0 sein"}

    def test_nan_is_not_a_number(self):
        schema = create_validation_schema({"preis": FieldRule(type="number")})
        assert schema.validate({"preis": math.nan}).errors == {"preis": "preis hat einen ungültigen Typ"}

    def test_booleans_are_not_numbers(self):
        schema = create_validation_schema({"aktiv": FieldRule(type="number")})
        assert not schema.validate({"aktiv": True}).is_valid

    def test_string_bounds(self):
        schema = create_validation_schema({"name": COMMON_RULES["name"]})
        assert schema.validate({"name": "A"}).errors == {"name": "Name muss mindestens 2 Zeichen lang sein"}
        assert schema.validate({"name": "A" * 101}).errors == {"name": "Name darf maximal 100 Zeichen lang sein"}

    def test_pattern_runs_after_bounds(self):
        schema = create_validation_schema({
            "plz": FieldRule(
                max_length=5,
                pattern=r"^\d{5}$",
                error_messages={"max_length": "zu lang", "pattern": "PLZ muss aus 5 Ziffern bestehen"},
            ),
        })
        assert schema.validate({"plz": "1234567"}).errors == {"plz": "zu lang"}
        assert schema.validate({"plz": "12a45"}).errors == {"plz": "PLZ muss aus 5 Ziffern bestehen"}

    def test_pattern_applies_to_non_strings(self):
        schema = create_validation_schema({"plz": FieldRule(pattern=r"^\d{5}$")})
        assert schema.validate({"plz": 10115}).is_valid
        assert schema.validate({"plz": 123}).errors == {"plz": "plz hat ein ungültiges Format"}

    def test_booleans_are_matched_in_lower_case(self):
        schema = create_validation_schema({"zustimmung": FieldRule(pattern=r"^true$")})
        assert schema.validate({"zustimmung": True}).is_valid
        assert schema.validate({"zustimmung": False}).errors == {
            "zustimmung": "zustimmung hat ein ungültiges Format"
        }

    @pytest.mark.parametrize("value_type,value", [
        ("string", "text"),
        ("number", 3.5),
        ("boolean", False),
        ("array", ["a"]),
        ("object", {"a": 1}),
        ("date", date(2024, 5, 10)),
    ])
    def test_type_categories(self, value_type, value):
        schema = create_validation_schema({"wert": FieldRule(type=value_type)})
        assert schema.validate({"wert": value}).is_valid

    def test_date_type_rejects_strings(self):
        schema = create_validation_schema({"datum": FieldRule(type="date")})
        assert not schema.validate({"datum": "2024-05-10"}).is_valid


class TestCustomValidators:
    def test_receives_value_and_full_record(self):
        check = MagicMock(return_value=True)
        schema = create_validation_schema({"endDatum": FieldRule(validate=check)})
        record = {"startDatum": "2024-05-10", "endDatum": "2024-05-12"}

        assert schema.validate(record).is_valid
        check.assert_called_once_with("2024-05-12", record)

    def test_string_result_is_the_message(self):
        schema = create_validation_schema({
            "kennzeichen": FieldRule(validate=lambda value, record: "Kennzeichen bereits vergeben"),
        })
        assert schema.validate({"kennzeichen": "B-AB 1"}).errors == {"kennzeichen": "Kennzeichen bereits vergeben"}

    def test_result_types(self):
        schema = create_validation_schema({
            "a": FieldRule(validate=lambda value, record: Ok()),
            "b": FieldRule(validate=lambda value, record: Err("b ist falsch")),
            "c": FieldRule(validate=lambda value, record: False, error_messages={"validate": "c passt nicht"}),
            "d": FieldRule(validate=lambda value, record: None),
        })
        result = schema.validate({"a": 1, "b": 1, "c": 1, "d": 1})
        assert result.errors == {
            "b": "b ist falsch",
            "c": "c passt nicht",
            "d": "d ist ungültig",
        }

    def test_exceptions_become_field_errors(self, caplog):
        def explode(value, record):
            raise RuntimeError("boom")

        schema = create_validation_schema({"kunde": FieldRule(validate=explode)})
        result = schema.validate({"kunde": "Schmidt"})

        assert result.errors == {"kunde": "Validierungsfehler bei kunde"}
        assert "Error in custom validator for kunde" in caplog.text


class TestFieldSelection:
    def test_only_selected_fields_are_evaluated(self, kunden_schema):
        result = kunden_schema.validate({}, fields=["kundennummer"])
        assert result.errors == {"kundennummer": "Kundennummer ist erforderlich"}

    def test_single_path_string_selects_that_field(self, kunden_schema):
        result = kunden_schema.validate({}, fields="kundennummer")
        assert result.errors == {"kundennummer": "Kundennummer ist erforderlich"}

    def test_unknown_selected_fields_are_ignored(self, kunden_schema):
        assert kunden_schema.validate({}, fields=["unbekannt"]).is_valid

    def test_abort_early_stops_after_first_failing_field(self, kunden_schema):
        result = kunden_schema.validate({}, abort_early=True)
        assert result.errors == {"kundennummer": "Kundennummer ist erforderlich"}

    def test_without_abort_early_every_field_is_reported(self, kunden_schema):
        result = kunden_schema.validate({})
        assert set(result.errors) == {"kundennummer", "kunde", "email", "einzugsadresse.plz"}

    def test_schema_is_reusable(self, kunden_schema):
        assert not kunden_schema.validate({}).is_valid
        valid = {
            "kundennummer": "K-1",
            "kunde": "Schmidt",
            "email": "a@b.de",
            "einzugsadresse": {"plz": "80331"},
        }
        assert kunden_schema.validate(valid).is_valid
        assert not kunden_schema.validate({}).is_valid


class TestSchemaBuilding:
    def test_rule_dicts_are_accepted(self):
        schema = create_validation_schema({
            "email": {
                "required": True,
                "pattern": EMAIL_RE,
                "error_messages": {"required": "E-Mail ist erforderlich"},
            },
        })
        assert schema.validate({}).errors == {"email": "E-Mail ist erforderlich"}
        assert "email" in schema
        assert schema.fields == ["email"]

    def test_unknown_rule_keys_are_rejected(self):
        with pytest.raises(ImproperlyConfigured):
            create_validation_schema({"email": {"requird": True}})

    def test_raise_if_invalid(self, kunden_schema):
        with pytest.raises(SchemaValidationError) as excinfo:
            kunden_schema.raise_if_invalid({"kunde": "Schmidt"})
        assert "kundennummer" in excinfo.value.errors
        assert "kunde" not in excinfo.value.errors
