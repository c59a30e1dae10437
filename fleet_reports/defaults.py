"""
Default configuration for the fleet-reports app.

Every setting consumed at runtime lives here, grouped by feature area.
Projects override individual keys through the ``FLEET_REPORTS`` Django
setting; anything left unset falls back to these values.
"""

from __future__ import annotations

from typing import Any

LIBRARY_VERSION = "0.1.0"
LIBRARY_NAME = "fleet-reports"


# --------------------------------------------------------------------------- #
# Library-wide defaults (grouped by feature area)
# --------------------------------------------------------------------------- #
LIBRARY_DEFAULTS: dict[str, Any] = {
    "reporting_settings": {
        "default_page_size": 50,
        "max_page_size": 500,
        "max_definition_limit": 10_000,
        # Bump CustomReport.last_run_at after a successful saved-report run.
        "record_last_run": True,
        "max_name_length": 200,
    },
    "multitenancy_settings": {
        "tenant_claim": "organisation_id",
    },
    "graphql_settings": {
        "enable_graphiql": False,
    },
}


__all__ = ["LIBRARY_DEFAULTS", "LIBRARY_VERSION", "LIBRARY_NAME"]
