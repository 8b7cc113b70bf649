"""Category cache service native package exports."""

from packages.catalog_shared.envelope import EnvelopeMeta, Result
from packages.catalog_shared.errors import ErrorCategory, ErrorDetail
from services.state.category_cache.component import SERVICE_COMPONENT_ID
from services.state.category_cache.config import CategoryCacheSettings
from services.state.category_cache.domain import (
    CacheListener,
    CacheState,
    CategoryInput,
    CategoryRecord,
    CategoryStatus,
    ViewFilter,
)
from services.state.category_cache.implementation import DefaultCategoryCacheService
from services.state.category_cache.reporting import ErrorReporter, LoggingErrorReporter
from services.state.category_cache.service import (
    CategoryCacheService,
    build_category_cache_service,
)
from services.state.category_cache.view import DerivedView, derive_view

__all__ = [
    "SERVICE_COMPONENT_ID",
    "CacheListener",
    "CacheState",
    "CategoryCacheService",
    "CategoryCacheSettings",
    "CategoryInput",
    "CategoryRecord",
    "CategoryStatus",
    "DefaultCategoryCacheService",
    "DerivedView",
    "EnvelopeMeta",
    "ErrorCategory",
    "ErrorDetail",
    "ErrorReporter",
    "LoggingErrorReporter",
    "Result",
    "ViewFilter",
    "build_category_cache_service",
    "derive_view",
]
