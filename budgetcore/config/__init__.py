"""Configuration package."""

from budgetcore.config.settings import (
    AppSettings,
    DispatcherSettings,
    EngineSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "DispatcherSettings",
    "EngineSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
