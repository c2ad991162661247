import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class FormcoreConfig(AppConfig):
    name = "formcore"
    verbose_name = "Form Core"

    def ready(self):
        # Fail fast on misconfigured FORMCORE_* settings
        from .conf import check_settings

        check_settings()
