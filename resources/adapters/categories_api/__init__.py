"""Categories API adapter resource exports."""

from resources.adapters.categories_api.adapter import (
    CategoriesApi,
    CategoriesApiError,
    CategoriesApiNotFoundError,
    CategoriesApiProtocolError,
    CategoriesApiTransportError,
    CategoriesApiValidationError,
    CategoryInput,
    CategoryRecord,
    CategoryStatus,
)
from resources.adapters.categories_api.component import (
    RESOURCE_COMPONENT_ID,
    build_component,
)
from resources.adapters.categories_api.config import (
    CategoriesApiSettings,
    resolve_categories_api_settings,
)
from resources.adapters.categories_api.http_adapter import HttpCategoriesApi

__all__ = [
    "CategoriesApi",
    "CategoriesApiError",
    "CategoriesApiNotFoundError",
    "CategoriesApiProtocolError",
    "CategoriesApiSettings",
    "CategoriesApiTransportError",
    "CategoriesApiValidationError",
    "CategoryInput",
    "CategoryRecord",
    "CategoryStatus",
    "HttpCategoriesApi",
    "RESOURCE_COMPONENT_ID",
    "build_component",
    "resolve_categories_api_settings",
]
