"""
Django app configuration for fleet-reports.

On startup this module:
- checks every registered report column against the installed models
- initializes Sentry error reporting when ``SENTRY_DSN`` is set
"""

import logging

from django.apps import AppConfig as BaseAppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)


class AppConfig(BaseAppConfig):
    """Django app configuration for fleet-reports."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "fleet_reports"
    verbose_name = "Fleet Reports"
    label = "fleet_reports"

    def ready(self):
        """Initialize the application after Django has loaded."""
        logger.debug("Fleet reports initialization started")
        self._validate_registry()
        self._setup_sentry()
        logger.info("Fleet reports initialized")

    def _validate_registry(self):
        """Fail fast when a data source points at a missing column."""
        from .extensions.reporting.registry import get_registry

        problems = get_registry().check_models()
        if problems:
            raise ImproperlyConfigured(
                "Report registry does not match the installed models: "
                + "; ".join(problems)
            )
        logger.debug("Report registry validated: %s data sources", len(get_registry()))

    def _setup_sentry(self):
        dsn = getattr(settings, "SENTRY_DSN", "")
        if not dsn:
            return
        import sentry_sdk
        from sentry_sdk.integrations.django import DjangoIntegration

        sentry_sdk.init(
            dsn=dsn,
            integrations=[DjangoIntegration()],
            environment=getattr(settings, "ENVIRONMENT", None),
        )
        logger.info("Sentry error reporting enabled")
