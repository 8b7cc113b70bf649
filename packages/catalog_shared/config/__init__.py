"""Public API for shared catalog configuration utilities."""

from .models import (
    DEFAULT_CONFIG_PATH,
    CatalogSettings,
    ComponentsSettings,
    LoggingSettings,
    load_settings,
    resolve_component_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "CatalogSettings",
    "ComponentsSettings",
    "LoggingSettings",
    "load_settings",
    "resolve_component_settings",
]
