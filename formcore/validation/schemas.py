"""
Domain Validation Schemas

Rule sets for the records the forms edit. Built once at import time and
shared read-only by every open form of the same record type.

- Umzug (move): customer, dates, move-out / move-in addresses
- Mitarbeiter (employee): contact details
- Fahrzeug (vehicle): registration and mileage
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Mapping, Optional

from ..paths import get_value
from .engine import Err, FieldRule, Ok, create_validation_schema
from .rules import COMMON_RULES, PATTERNS


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def end_not_before_start(start_path: str, message: str):
    """Cross-field rule: the validated date may not precede the date at ``start_path``."""

    def check(value: Any, record: Mapping[str, Any]):
        start = _as_date(get_value(record, start_path))
        end = _as_date(value)
        if start and end and end < start:
            return Err(message)
        return Ok()

    return check


def _address_rules(prefix: str) -> dict:
    return {
        f"{prefix}.strasse": FieldRule(
            required=True,
            max_length=200,
            error_messages={"required": "Straße ist erforderlich"},
        ),
        f"{prefix}.hausnummer": FieldRule(
            required=False,
            max_length=10,
        ),
        f"{prefix}.plz": COMMON_RULES["postal_code"],
        f"{prefix}.ort": FieldRule(
            required=True,
            max_length=100,
            error_messages={"required": "Ort ist erforderlich"},
        ),
    }


UMZUG_SCHEMA = create_validation_schema({
    "kundennummer": FieldRule(
        required=True,
        error_messages={"required": "Kundennummer ist erforderlich"},
    ),
    "kunde": replace(
        COMMON_RULES["name"],
        error_messages={
            "required": "Kundenname ist erforderlich",
            "min_length": "Kundenname muss mindestens 2 Zeichen lang sein",
        },
    ),
    "startDatum": FieldRule(
        required=True,
        pattern=PATTERNS["date_iso_string"],
        error_messages={
            "required": "Startdatum ist erforderlich",
            "pattern": "Startdatum hat ein ungültiges Format",
        },
    ),
    "endDatum": FieldRule(
        required=True,
        pattern=PATTERNS["date_iso_string"],
        validate=end_not_before_start("startDatum", "Enddatum darf nicht vor dem Startdatum liegen"),
        error_messages={"required": "Enddatum ist erforderlich"},
    ),
    **_address_rules("auszugsadresse"),
    **_address_rules("einzugsadresse"),
    "preis.netto": FieldRule(
        required=False,
        type="number",
        min_value=0,
        error_messages={
            "type": "Nettopreis muss eine Zahl sein",
            "min_value": "Nettopreis darf nicht negativ sein",
        },
    ),
})

MITARBEITER_SCHEMA = create_validation_schema({
    "vorname": replace(
        COMMON_RULES["name"],
        error_messages={"required": "Vorname ist erforderlich"},
    ),
    "nachname": replace(
        COMMON_RULES["name"],
        error_messages={"required": "Nachname ist erforderlich"},
    ),
    "email": COMMON_RULES["email"],
    "telefon": replace(COMMON_RULES["phone"], required=False),
    "adresse.plz": replace(COMMON_RULES["postal_code"], required=False),
})

FAHRZEUG_SCHEMA = create_validation_schema({
    "kennzeichen": FieldRule(
        required=True,
        pattern=r"^[A-ZÄÖÜ]{1,3}-[A-Z]{1,2} ?\d{1,4}[EH]?$",
        error_messages={
            "required": "Kennzeichen ist erforderlich",
            "pattern": "Kennzeichen hat ein ungültiges Format (z.B. B-AB 1234)",
        },
    ),
    "typ": FieldRule(
        required=True,
        error_messages={"required": "Fahrzeugtyp ist erforderlich"},
    ),
    "kilometerstand": FieldRule(
        required=False,
        type="number",
        min_value=0,
        max_value=2_000_000,
        error_messages={"type": "Kilometerstand muss eine Zahl sein"},
    ),
})
