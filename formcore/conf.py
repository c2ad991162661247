"""
Settings access for the form core.

Every FORMCORE_* setting has a default here; projects override them in
their Django settings module.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "FORMCORE_CLEAR_ERROR_AFTER": 0,
    "FORMCORE_VALIDATE_ON_CHANGE": False,
    "FORMCORE_DEFAULT_ERROR_MESSAGE": "Ein Fehler ist aufgetreten",
    "FORMCORE_SENSITIVE_KEYS": (),
}

# Always stripped from logged error context, whatever the project adds.
BASE_SENSITIVE_KEYS = ("credentials", "password", "token", "access_token", "accessToken")


def get_setting(name: str) -> Any:
    if name not in DEFAULTS:
        raise KeyError(f"Unknown form core setting: {name}")
    return getattr(settings, name, DEFAULTS[name])


def sensitive_keys() -> tuple:
    return BASE_SENSITIVE_KEYS + tuple(get_setting("FORMCORE_SENSITIVE_KEYS"))


def check_settings() -> None:
    """
    Validate FORMCORE_* settings.
    Raises ImproperlyConfigured on the first bad value.
    """
    clear_after = get_setting("FORMCORE_CLEAR_ERROR_AFTER")
    if isinstance(clear_after, bool) or not isinstance(clear_after, int) or clear_after < 0:
        error_msg = f"FORMCORE_CLEAR_ERROR_AFTER must be a non-negative integer, got {clear_after!r}"
        logger.critical(error_msg)
        raise ImproperlyConfigured(error_msg)

    if not isinstance(get_setting("FORMCORE_VALIDATE_ON_CHANGE"), bool):
        raise ImproperlyConfigured("FORMCORE_VALIDATE_ON_CHANGE must be a boolean")

    default_message = get_setting("FORMCORE_DEFAULT_ERROR_MESSAGE")
    if not isinstance(default_message, str) or not default_message.strip():
        raise ImproperlyConfigured("FORMCORE_DEFAULT_ERROR_MESSAGE must be a non-empty string")

    keys = get_setting("FORMCORE_SENSITIVE_KEYS")
    if not isinstance(keys, (list, tuple)) or not all(isinstance(k, str) for k in keys):
        raise ImproperlyConfigured("FORMCORE_SENSITIVE_KEYS must be a sequence of strings")

    logger.debug("Form core settings validated")
