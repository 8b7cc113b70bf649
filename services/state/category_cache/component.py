"""Component declaration for the category cache service."""

from __future__ import annotations

from packages.catalog_shared.config import CatalogSettings

SERVICE_COMPONENT_ID = "service_category_cache"


def build_component(*, settings: CatalogSettings) -> object:
    """Build the category cache with its HTTP adapter from root settings."""
    from services.state.category_cache.service import build_category_cache_service

    return build_category_cache_service(settings=settings)
