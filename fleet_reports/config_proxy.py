"""
Configuration management for fleet-reports.

This module provides a settings proxy that resolves dotted keys from the
Django ``FLEET_REPORTS`` setting and falls back to the library defaults.
"""

from typing import Any, Optional

from django.conf import settings

from .defaults import LIBRARY_DEFAULTS


class SettingsProxy:
    """
    Proxy for accessing fleet-reports settings with hierarchical resolution.

    Settings are resolved in the following order:
    1. Global Django settings (FLEET_REPORTS)
    2. Library defaults (LIBRARY_DEFAULTS)

    Values are read on every call so ``override_settings`` in tests takes
    effect immediately.
    """

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value with hierarchical resolution.

        Args:
            key: Dotted setting key, e.g. ``reporting_settings.max_page_size``
            default: Value returned when no source defines the key

        Returns:
            The setting value from the highest priority source
        """
        django_value = self._get_django_setting(key)
        if django_value is not None:
            return django_value

        library_value = self._get_nested_value(LIBRARY_DEFAULTS, key)
        if library_value is not None:
            return library_value

        return default

    def get_section(self, section: str) -> dict[str, Any]:
        """Return a merged copy of one settings section."""
        merged = dict(LIBRARY_DEFAULTS.get(section) or {})
        overrides = getattr(settings, "FLEET_REPORTS", {}) or {}
        section_overrides = overrides.get(section)
        if isinstance(section_overrides, dict):
            merged.update(section_overrides)
        return merged

    def _get_django_setting(self, key: str) -> Any:
        django_settings = getattr(settings, "FLEET_REPORTS", {}) or {}
        return self._get_nested_value(django_settings, key)

    def _get_nested_value(self, config: dict[str, Any], key: str) -> Any:
        """
        Get a nested value from a configuration dictionary using dot notation.

        Args:
            config: Configuration dictionary
            key: Key in dot notation (e.g., 'reporting_settings.max_page_size')

        Returns:
            The nested value or None if not found
        """
        current: Any = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current


_settings_proxy: Optional[SettingsProxy] = None


def get_settings_proxy() -> SettingsProxy:
    """Return the process-wide settings proxy."""
    global _settings_proxy
    if _settings_proxy is None:
        _settings_proxy = SettingsProxy()
    return _settings_proxy


def get_setting(key: str, default: Any = None) -> Any:
    """
    Convenience function to get a setting value.

    Args:
        key: Dotted setting key
        default: Default value if the setting is not found

    Returns:
        The resolved setting value
    """
    return get_settings_proxy().get(key, default)


__all__ = ["SettingsProxy", "get_settings_proxy", "get_setting"]
