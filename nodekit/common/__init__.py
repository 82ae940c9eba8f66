"""Common utilities for nodekit.

This package provides reusable utilities like logging, config, tracing
and the process-wide settings store.
"""

from nodekit.common.settings import SettingsStore, get_settings_store

__all__ = ["SettingsStore", "get_settings_store"]
