import pytest

from formcore.validation import FieldRule, create_validation_schema
from formcore.validation.rules import COMMON_RULES


class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


@pytest.fixture
def timers():
    created = []

    def factory(interval, function, args=None, kwargs=None):
        timer = FakeTimer(interval, function, args, kwargs)
        created.append(timer)
        return timer

    factory.created = created
    return factory


@pytest.fixture
def umzug_record():
    return {
        "kundennummer": "K-1001",
        "kunde": "Familie Schmidt",
        "startDatum": "2024-05-10",
        "endDatum": "2024-05-12",
        "auszugsadresse": {
            "strasse": "Hauptstraße",
            "hausnummer": "12",
            "plz": "10115",
            "ort": "Berlin",
        },
        "einzugsadresse": {
            "strasse": "Marktplatz",
            "hausnummer": "3",
            "plz": "80331",
            "ort": "München",
        },
    }


@pytest.fixture
def kunden_schema():
    return create_validation_schema({
        "kundennummer": FieldRule(
            required=True,
            error_messages={"required": "Kundennummer ist erforderlich"},
        ),
        "kunde": FieldRule(
            required=True,
            error_messages={"required": "Kundenname ist erforderlich"},
        ),
        "email": COMMON_RULES["email"],
        "einzugsadresse.plz": COMMON_RULES["postal_code"],
    })
