"""Component declaration for the categories API adapter."""

from __future__ import annotations

from packages.catalog_shared.config import CatalogSettings
from resources.adapters.categories_api.adapter import CategoriesApi

RESOURCE_COMPONENT_ID = "adapter_categories_api"


def build_component(*, settings: CatalogSettings) -> CategoriesApi:
    """Build the HTTP-backed categories API adapter from root settings."""
    from resources.adapters.categories_api.config import (
        resolve_categories_api_settings,
    )
    from resources.adapters.categories_api.http_adapter import HttpCategoriesApi

    return HttpCategoriesApi(settings=resolve_categories_api_settings(settings))
