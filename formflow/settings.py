"""
FormFlow – Django Settings
Hosts the formcore app for record-editing forms (moves, employees, vehicles, invoices).
"""

from pathlib import Path
import os
import environ

# =============================================================================
# BASE SETUP
# =============================================================================
BASE_DIR = Path(__file__).resolve().parent.parent
env = environ.Env()

IS_PRODUCTION = os.getenv("PRODUCTION", "false").lower() == "true"
DEBUG = os.getenv("DEBUG", "true").lower() == "true"

SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-dev-only-change-in-production")
ALLOWED_HOSTS = ["*"]

# =============================================================================
# FORM CORE
# =============================================================================
# Milliseconds until a general error clears itself; 0 keeps it until cleared.
FORMCORE_CLEAR_ERROR_AFTER = env.int("FORMCORE_CLEAR_ERROR_AFTER", default=0)
FORMCORE_VALIDATE_ON_CHANGE = env.bool("FORMCORE_VALIDATE_ON_CHANGE", default=False)
FORMCORE_DEFAULT_ERROR_MESSAGE = env.str(
    "FORMCORE_DEFAULT_ERROR_MESSAGE", default="Ein Fehler ist aufgetreten"
)
FORMCORE_SENSITIVE_KEYS = tuple(env.list("FORMCORE_SENSITIVE_KEYS", default=[]))

# Structured Logging
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'structured': {
            'format': '[%(asctime)s] %(levelname)s [%(name)s:%(lineno)s] [operation=%(operation)s] %(message)s',
        },
    },
    'filters': {
        'operation': {
            '()': 'formflow.logging_filters.OperationFilter',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'structured',
            'filters': ['operation'],
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'DEBUG' if DEBUG else 'INFO',
    },
}

# =============================================================================
# INSTALLED APPS
# =============================================================================
INSTALLED_APPS = [
    "formcore.apps.FormcoreConfig",
]

USE_TZ = True
LANGUAGE_CODE = "de-de"
TIME_ZONE = "Europe/Berlin"
