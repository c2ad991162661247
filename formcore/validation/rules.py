"""
Reusable patterns and field rules shared by the record forms.

Messages are German; the forms are German-language UIs.
"""

from __future__ import annotations

import re

from .engine import FieldRule

PATTERNS = {
    "email": re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
    "phone": re.compile(r"^[+]?[0-9\s\-\(\)]{8,20}$"),
    "german_postal_code": re.compile(r"^\d{5}$"),
    "url": re.compile(r"^(https?://)?([\da-z\.-]+)\.([a-z\.]{2,6})([/\w \.-]*)*/?$"),
    "date_iso_string": re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}(:\d{2}(\.\d{3})?)?)?Z?$"),
}

EMAIL_RE = PATTERNS["email"]

COMMON_RULES = {
    "name": FieldRule(
        required=True,
        min_length=2,
        max_length=100,
        error_messages={
            "required": "Name ist erforderlich",
            "min_length": "Name muss mindestens 2 Zeichen lang sein",
            "max_length": "Name darf maximal 100 Zeichen lang sein",
        },
    ),
    "email": FieldRule(
        required=True,
        pattern=EMAIL_RE,
        error_messages={
            "required": "E-Mail ist erforderlich",
            "pattern": "Bitte geben Sie eine gültige E-Mail-Adresse ein",
        },
    ),
    "phone": FieldRule(
        required=True,
        pattern=PATTERNS["phone"],
        error_messages={
            "required": "Telefonnummer ist erforderlich",
            "pattern": "Telefonnummer hat ein ungültiges Format "
                       "(erlaubt sind Zahlen, Leerzeichen, Klammern und Bindestriche)",
        },
    ),
    "postal_code": FieldRule(
        required=True,
        pattern=PATTERNS["german_postal_code"],
        error_messages={
            "required": "PLZ ist erforderlich",
            "pattern": "PLZ muss aus 5 Ziffern bestehen",
        },
    ),
}
