"""
Transport Error Classifier

Turns whatever the transport layer raised into an ApiErrorEnvelope with a
non-empty, user-presentable message. Failures are tagged once at the
boundary (classify_failure) and the rest of the module switches on the tag:

- HasResponse(status, data): the server answered with an error status
- SentNoResponse(): request dispatched, nothing came back (network / timeout)
- Other(message): raised locally, no transport envelope at all

Recognized inputs: mappings shaped {response: {status, data}} / {request} /
{message}, objects exposing the same names as attributes, and
requests.RequestException instances.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import requests
from django.conf import settings

from ..conf import get_setting, sensitive_keys
from .errors import ApiErrorEnvelope, ErrorKind, normalize_server_errors

logger = logging.getLogger(__name__)

MSG_BAD_REQUEST = "Ungültige Anfrage"
MSG_SESSION_EXPIRED = "Sitzung abgelaufen oder nicht angemeldet"
MSG_FORBIDDEN = "Keine Berechtigung für diese Aktion"
MSG_NOT_FOUND = "Ressource nicht gefunden"
MSG_VALIDATION = "Validierungsfehler"
MSG_SERVER_ERROR = "Serverfehler. Bitte versuchen Sie es später erneut."
MSG_NO_RESPONSE = "Keine Antwort vom Server. Bitte überprüfen Sie Ihre Internetverbindung."

TIMEOUT_CODE = "ECONNABORTED"
NETWORK_ERROR_MARKER = "Network Error"


@dataclass(frozen=True)
class HasResponse:
    status: int
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SentNoResponse:
    pass


@dataclass(frozen=True)
class Other:
    message: str = ""


TransportFailure = Union[HasResponse, SentNoResponse, Other]


def _lookup(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _response_payload(response: Any) -> Dict[str, Any]:
    if isinstance(response, requests.Response):
        try:
            payload = response.json()
        except ValueError:
            return {}
    else:
        payload = _lookup(response, "data")
    return payload if isinstance(payload, Mapping) else {}


def _response_status(response: Any) -> int:
    if isinstance(response, requests.Response):
        status = response.status_code
    else:
        status = _lookup(response, "status")
        if status is None:
            status = _lookup(response, "status_code")
    try:
        return int(status)
    except (TypeError, ValueError):
        return 0


def _error_message(err: Any) -> str:
    message = _lookup(err, "message")
    if message is None and isinstance(err, BaseException):
        message = str(err)
    return str(message) if message is not None else ""


def classify_failure(err: Any) -> TransportFailure:
    response = _lookup(err, "response")
    if response is not None:
        return HasResponse(status=_response_status(response), data=_response_payload(response))
    if _lookup(err, "request") is not None:
        return SentNoResponse()
    return Other(message=_error_message(err))


def format_api_error(err: Any, default_message: Optional[str] = None) -> ApiErrorEnvelope:
    """
    Normalize a transport failure.

    Status precedence: 400, 401, 403, 404, 422, >=500, then any other code.
    401/403/404/5xx never carry field errors.
    """
    default_message = default_message or get_setting("FORMCORE_DEFAULT_ERROR_MESSAGE")
    failure = classify_failure(err)

    if isinstance(failure, SentNoResponse):
        return ApiErrorEnvelope(
            message=MSG_NO_RESPONSE,
            status=0,
            is_network_error=True,
            kind=ErrorKind.NETWORK,
        )

    if isinstance(failure, Other):
        return ApiErrorEnvelope(message=default_message, status=0)

    status, data = failure.status, failure.data
    server_message = data.get("message") or None
    server_errors = normalize_server_errors(data.get("errors"))

    if status == 400:
        return ApiErrorEnvelope(
            message=server_message or MSG_BAD_REQUEST,
            status=status,
            errors=server_errors,
            kind=ErrorKind.VALIDATION if server_errors else ErrorKind.GENERIC_API,
        )
    elif status == 401:
        return ApiErrorEnvelope(message=MSG_SESSION_EXPIRED, status=status, kind=ErrorKind.AUTH)
    elif status == 403:
        return ApiErrorEnvelope(message=MSG_FORBIDDEN, status=status, kind=ErrorKind.AUTHORIZATION)
    elif status == 404:
        return ApiErrorEnvelope(
            message=server_message or MSG_NOT_FOUND,
            status=status,
            kind=ErrorKind.NOT_FOUND,
        )
    elif status == 422:
        return ApiErrorEnvelope(
            message=MSG_VALIDATION,
            status=status,
            errors=server_errors,
            kind=ErrorKind.VALIDATION if server_errors else ErrorKind.GENERIC_API,
        )
    elif status >= 500:
        return ApiErrorEnvelope(message=MSG_SERVER_ERROR, status=status, kind=ErrorKind.SERVER)

    return ApiErrorEnvelope(
        message=server_message or default_message,
        status=status,
        errors=server_errors,
    )


def is_network_error(err: Any) -> bool:
    if isinstance(err, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(classify_failure(err), SentNoResponse):
        return True
    if _lookup(err, "code") == TIMEOUT_CODE:
        return True
    return NETWORK_ERROR_MARKER in _error_message(err)


def is_auth_error(err: Any) -> bool:
    failure = classify_failure(err)
    return isinstance(failure, HasResponse) and failure.status == 401


def _safe_context(context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    hidden = set(sensitive_keys())
    return {key: value for key, value in (context or {}).items() if key not in hidden}


def _request_info(err: Any) -> tuple:
    request = _lookup(err, "request")
    if request is None:
        request = _lookup(err, "config")
    if request is None:
        return "unknown", "unknown"
    endpoint = _lookup(request, "url") or "unknown"
    method = _lookup(request, "method") or "unknown"
    return endpoint, method


def log_error(operation: str, err: Any, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Log a transport failure without leaking credentials.

    Returns the sanitized summary that was logged.
    """
    response = _lookup(err, "response")
    endpoint, method = _request_info(err)
    if response is not None:
        status = _response_status(response)
        status_text = _lookup(response, "reason") or _lookup(response, "statusText") or "unknown"
    else:
        status, status_text = 0, "unknown"

    error_info = {
        "operation": operation,
        "endpoint": endpoint,
        "method": method,
        "status": status,
        "status_text": status_text,
        "message": _error_message(err) or "No error message",
        "context": _safe_context(context),
    }

    if settings.DEBUG and isinstance(err, BaseException):
        logger.error("Error details: %s", error_info, exc_info=err, extra={"operation": operation})
    else:
        logger.error("Error details: %s", error_info, extra={"operation": operation})
    return error_info
