"""
Rule Engine

Compiles a rule map { field path: FieldRule } into a reusable
ValidationSchema. Evaluation per field stops at the first failing rule:

required -> type -> numeric bounds -> string bounds -> pattern -> custom validator

Empty values only ever fail the required rule; a non-required empty field
passes without further checks.
"""

from __future__ import annotations

import logging
import numbers
import re
from dataclasses import dataclass, field, fields as dataclass_fields
from datetime import date
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Pattern, Union

from django.core.exceptions import ImproperlyConfigured

from ..paths import get_value
from .errors import SchemaValidationError

logger = logging.getLogger(__name__)

VALUE_TYPES = ("string", "number", "boolean", "array", "object", "date")


@dataclass(frozen=True)
class Ok:
    pass


@dataclass(frozen=True)
class Err:
    message: Optional[str] = None


Outcome = Union[Ok, Err]


def to_outcome(result: Any) -> Outcome:
    """Normalize a custom validator's return value into Ok | Err."""
    if isinstance(result, (Ok, Err)):
        return result
    if result is True:
        return Ok()
    if isinstance(result, str) and result:
        return Err(result)
    return Err()


@dataclass(frozen=True)
class FieldRule:
    required: bool = False
    type: Optional[str] = None
    min_value: Optional[Union[int, float, Decimal]] = None
    max_value: Optional[Union[int, float, Decimal]] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[Union[str, Pattern]] = None
    validate: Optional[Callable[[Any, Mapping[str, Any]], Any]] = None
    error_messages: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.type is not None and self.type.lower() not in VALUE_TYPES:
            logger.warning("Unknown value type %r; type check will always pass", self.type)
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", re.compile(self.pattern))
        object.__setattr__(self, "error_messages", MappingProxyType(dict(self.error_messages)))

    @classmethod
    def from_dict(cls, path: str, definition: Mapping[str, Any]) -> "FieldRule":
        known = {f.name for f in dataclass_fields(cls)}
        unknown = set(definition) - known
        if unknown:
            raise ImproperlyConfigured(
                f"Unknown rule key(s) for field {path!r}: {', '.join(sorted(unknown))}"
            )
        return cls(**definition)

    def message(self, rule_name: str, default: str) -> str:
        return self.error_messages.get(rule_name) or default


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: Dict[str, str] = field(default_factory=dict)


def is_empty_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, frozenset, Mapping)):
        return len(value) == 0
    return False


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        return not value.is_nan()
    if isinstance(value, numbers.Real):
        return value == value
    return False


def _matches_type(value: Any, value_type: str) -> bool:
    value_type = value_type.lower()
    if value_type == "string":
        return isinstance(value, str)
    elif value_type == "number":
        return _is_number(value)
    elif value_type == "boolean":
        return isinstance(value, bool)
    elif value_type == "array":
        return isinstance(value, (list, tuple))
    elif value_type == "object":
        return isinstance(value, Mapping)
    elif value_type == "date":
        return isinstance(value, date)
    return True


class ValidationSchema:
    """Immutable, reusable set of per-field rules. Safe to share across forms."""

    def __init__(self, rules: Mapping[str, FieldRule]):
        self._rules = MappingProxyType(dict(rules))

    def __contains__(self, path: object) -> bool:
        return path in self._rules

    def __repr__(self) -> str:
        return f"ValidationSchema(fields={list(self._rules)})"

    @property
    def rules(self) -> Mapping[str, FieldRule]:
        return self._rules

    @property
    def fields(self) -> List[str]:
        return list(self._rules)

    def validate(
        self,
        data: Optional[Mapping[str, Any]],
        abort_early: bool = False,
        fields: Optional[Iterable[str]] = None,
    ) -> ValidationResult:
        """
        Evaluate ``data`` against the rules.

        ``fields`` restricts evaluation to those paths (a single path string
        is accepted); paths outside the selection are absent from the result. ``abort_early`` stops after the
        first failing field.
        """
        if isinstance(fields, str):
            fields = [fields]
        if fields is not None:
            selected = set(fields)
            paths = [path for path in self._rules if path in selected]
        else:
            paths = list(self._rules)

        errors: Dict[str, str] = {}
        for path in paths:
            message = self.check_field(path, data)
            if message is not None:
                errors[path] = message
                if abort_early:
                    break

        if errors:
            logger.debug("Validation failed for fields: %s", ", ".join(errors))
        return ValidationResult(is_valid=not errors, errors=errors)

    def check_field(self, path: str, data: Optional[Mapping[str, Any]]) -> Optional[str]:
        """Return the first failing rule's message for ``path``, or None."""
        rule = self._rules[path]
        value = get_value(data, path)

        if is_empty_value(value):
            if rule.required:
                return rule.message("required", f"{path} ist erforderlich")
            return None

        if rule.type and not _matches_type(value, rule.type):
            return rule.message("type", f"{path} hat einen ungültigen Typ")

        if _is_number(value):
            if rule.min_value is not None and value < rule.min_value:
                return rule.message("min_value", f"{path} muss mindestens {rule.min_value} sein")
            if rule.max_value is not None and value > rule.max_value:
                return rule.message("max_value", f"{path} darf maximal {rule.max_value} sein")

        if isinstance(value, str):
            if rule.min_length is not None and len(value) < rule.min_length:
                return rule.message(
                    "min_length", f"{path} muss mindestens {rule.min_length} Zeichen lang sein"
                )
            if rule.max_length is not None and len(value) > rule.max_length:
                return rule.message(
                    "max_length", f"{path} darf maximal {rule.max_length} Zeichen lang sein"
                )

        if rule.pattern is not None:
            if isinstance(value, bool):
                text = "true" if value else "false"
            else:
                text = value if isinstance(value, str) else str(value)
            if not rule.pattern.search(text):
                return rule.message("pattern", f"{path} hat ein ungültiges Format")

        if rule.validate is not None:
            try:
                outcome = to_outcome(rule.validate(value, data or {}))
            except Exception:
                logger.exception("Error in custom validator for %s", path)
                return f"Validierungsfehler bei {path}"
            if isinstance(outcome, Err):
                return outcome.message or rule.message("validate", f"{path} ist ungültig")

        return None

    def raise_if_invalid(self, data: Optional[Mapping[str, Any]]) -> None:
        result = self.validate(data)
        if not result.is_valid:
            raise SchemaValidationError(result.errors)


def create_validation_schema(
    rules: Mapping[str, Union[FieldRule, Mapping[str, Any]]],
) -> ValidationSchema:
    """
    Build a schema from { field path: FieldRule | rule dict }.

    Rule dicts use FieldRule's keyword names; unknown keys raise
    ImproperlyConfigured.
    """
    compiled: Dict[str, FieldRule] = {}
    for path, rule in rules.items():
        if not path:
            raise ImproperlyConfigured("Field paths must be non-empty strings")
        compiled[path] = rule if isinstance(rule, FieldRule) else FieldRule.from_dict(path, rule)
    return ValidationSchema(compiled)
