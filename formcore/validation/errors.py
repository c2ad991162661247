"""
Standardized Error Model

Every failure a form can show ends up in one of two places:
- field errors: { path: message }, rendered inline next to the input
- a general message: rendered as a toast / alert above the form

Transport failures are normalized into an ApiErrorEnvelope:
{ success: false, message, errors, status, is_network_error }

Error kinds:
- VALIDATION: field-scoped problems (local rules, or 400/422 with field errors)
- NETWORK: request sent, no response received
- AUTH: 401, session expired or missing
- AUTHORIZATION: 403
- NOT_FOUND: 404
- SERVER: 5xx
- GENERIC_API: any other response
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Ein Fehler ist aufgetreten"
INVALID_INPUT_MESSAGE = "Ungültige Eingabe"


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    NETWORK = "NETWORK"
    AUTH = "AUTH"
    AUTHORIZATION = "AUTHORIZATION"
    NOT_FOUND = "NOT_FOUND"
    SERVER = "SERVER"
    GENERIC_API = "GENERIC_API"


@dataclass
class FieldError:
    field: Optional[str]
    message: str

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"message": self.message}
        if self.field:
            result["field"] = self.field
        return result


@dataclass
class ApiErrorEnvelope:
    message: str
    status: int = 0
    errors: Optional[List[Dict[str, Any]]] = None
    is_network_error: bool = False
    kind: ErrorKind = ErrorKind.GENERIC_API
    success: bool = field(default=False, init=False)

    @property
    def is_auth_error(self) -> bool:
        return self.kind is ErrorKind.AUTH

    @property
    def field_errors(self) -> Dict[str, str]:
        return group_errors_by_field(self.errors)

    @property
    def general_errors(self) -> List[str]:
        return extract_general_errors(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "errors": self.errors,
            "status": self.status,
            "is_network_error": self.is_network_error,
        }


class SchemaValidationError(Exception):
    """Raised by ValidationSchema.raise_if_invalid when a record fails its rules."""

    def __init__(self, errors: Dict[str, str], message: str = "Validierung fehlgeschlagen"):
        self.errors = dict(errors)
        self.message = message
        super().__init__(message)


def group_errors_by_field(errors: Optional[List[Any]]) -> Dict[str, str]:
    """
    Map server error entries to { path: message }.

    Accepts {field, message} entries and express-validator style
    {param, msg} entries; entries addressing neither are skipped.
    """
    if not errors or not isinstance(errors, list):
        return {}

    grouped: Dict[str, str] = {}
    for error in errors:
        if not isinstance(error, dict):
            continue
        if error.get("field"):
            grouped[error["field"]] = error.get("message") or INVALID_INPUT_MESSAGE
        elif error.get("param"):
            grouped[error["param"]] = error.get("msg") or INVALID_INPUT_MESSAGE
    return grouped


def extract_general_errors(errors: Optional[List[Any]]) -> List[str]:
    if not errors or not isinstance(errors, list):
        return []

    messages = []
    for error in errors:
        if isinstance(error, dict):
            if error.get("field") or error.get("param"):
                continue
            messages.append(error.get("message") or error.get("msg") or DEFAULT_ERROR_MESSAGE)
        elif isinstance(error, str):
            messages.append(error)
    return messages


def format_validation_errors(
    errors: Dict[str, Any],
    prefix: str = "",
) -> List[FieldError]:
    """Flatten a nested { field: [messages] } payload into dotted-path FieldErrors."""
    field_errors = []

    for field_name, error_list in errors.items():
        full_field = f"{prefix}{field_name}" if prefix else field_name

        if isinstance(error_list, dict):
            field_errors.extend(format_validation_errors(error_list, f"{full_field}."))
        elif isinstance(error_list, list):
            for error in error_list:
                if isinstance(error, dict):
                    field_errors.extend(format_validation_errors(error, f"{full_field}."))
                else:
                    field_errors.append(FieldError(field=full_field, message=str(error)))
        else:
            field_errors.append(FieldError(field=full_field, message=str(error_list)))

    return field_errors


def normalize_server_errors(errors: Any) -> Optional[List[Dict[str, Any]]]:
    """
    Bring a server ``errors`` payload into list form.

    Lists pass through untouched; dict payloads keyed by field are
    flattened; anything else (including an empty payload) becomes None.
    """
    if not errors:
        return None
    if isinstance(errors, list):
        return errors
    if isinstance(errors, dict):
        return [error.to_dict() for error in format_validation_errors(errors)]

    logger.warning("Ignoring unrecognized server error payload of type %s", type(errors).__name__)
    return None
