"""
Validation Module

Rule engine, shared rules, domain schemas and the error model used by
the form controller.

- engine: FieldRule / ValidationSchema / create_validation_schema
- rules: reusable patterns and German-language field rules
- schemas: per-record-type schemas (Umzug, Mitarbeiter, Fahrzeug)
- errors: error kinds, envelopes, server error grouping
- api_errors: transport failure classification
"""

from .engine import (
    Err,
    FieldRule,
    Ok,
    ValidationResult,
    ValidationSchema,
    create_validation_schema,
    is_empty_value,
)
from .errors import (
    ApiErrorEnvelope,
    ErrorKind,
    FieldError,
    SchemaValidationError,
    extract_general_errors,
    format_validation_errors,
    group_errors_by_field,
)
from .api_errors import (
    HasResponse,
    Other,
    SentNoResponse,
    classify_failure,
    format_api_error,
    is_auth_error,
    is_network_error,
    log_error,
)
from .rules import COMMON_RULES, EMAIL_RE, PATTERNS

__all__ = [
    "Err",
    "FieldRule",
    "Ok",
    "ValidationResult",
    "ValidationSchema",
    "create_validation_schema",
    "is_empty_value",
    "ApiErrorEnvelope",
    "ErrorKind",
    "FieldError",
    "SchemaValidationError",
    "extract_general_errors",
    "format_validation_errors",
    "group_errors_by_field",
    "HasResponse",
    "Other",
    "SentNoResponse",
    "classify_failure",
    "format_api_error",
    "is_auth_error",
    "is_network_error",
    "log_error",
    "COMMON_RULES",
    "EMAIL_RE",
    "PATTERNS",
]
