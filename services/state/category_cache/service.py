"""Authoritative in-process Python API for the category cache."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Callable

from packages.catalog_shared.config import CatalogSettings
from packages.catalog_shared.envelope import EnvelopeMeta, Result
from resources.adapters.categories_api.adapter import CategoriesApi
from services.state.category_cache.domain import (
    CacheListener,
    CacheState,
    CategoryInput,
    CategoryStatus,
)
from services.state.category_cache.reporting import ErrorReporter


class CategoryCacheService(ABC):
    """Public API for the client-side copy of the ``/categories`` collection.

    Every mutation goes to the server first and is followed by a full
    refetch; the cache never patches ``records`` from a mutation response.
    Operations never raise: failures come back as a failed ``Result`` and
    leave the previous state in place.
    """

    @property
    @abstractmethod
    def state(self) -> CacheState:
        """Return the current immutable cache snapshot."""

    @abstractmethod
    def subscribe(self, listener: CacheListener) -> Callable[[], None]:
        """Register a state listener; return a callable that unregisters it."""

    @abstractmethod
    async def load(self, *, meta: EnvelopeMeta | None = None) -> Result[CacheState]:
        """Replace cached records with a fresh full read."""

    @abstractmethod
    async def create(
        self,
        *,
        category: CategoryInput | Mapping[str, object],
        meta: EnvelopeMeta | None = None,
    ) -> Result[CacheState]:
        """Create one category, then reconcile by refetch."""

    @abstractmethod
    async def update(
        self,
        *,
        category_id: int,
        category: CategoryInput | Mapping[str, object],
        meta: EnvelopeMeta | None = None,
    ) -> Result[CacheState]:
        """Update one category, then reconcile by refetch."""

    @abstractmethod
    async def delete(
        self, *, category_id: int, meta: EnvelopeMeta | None = None
    ) -> Result[CacheState]:
        """Delete one category, then reconcile by refetch."""

    @abstractmethod
    async def search_remote(
        self, *, query: str, meta: EnvelopeMeta | None = None
    ) -> Result[CacheState]:
        """Replace cached records with the server's search result."""

    @abstractmethod
    async def filter_remote(
        self,
        *,
        status: CategoryStatus | str,
        meta: EnvelopeMeta | None = None,
    ) -> Result[CacheState]:
        """Replace cached records with the server's status-filtered result."""


def build_category_cache_service(
    *,
    settings: CatalogSettings,
    api: CategoriesApi | None = None,
    reporter: ErrorReporter | None = None,
) -> CategoryCacheService:
    """Build the default category cache from typed settings."""
    from resources.adapters.categories_api.component import (
        build_component as build_categories_api,
    )
    from services.state.category_cache.config import resolve_category_cache_settings
    from services.state.category_cache.implementation import (
        DefaultCategoryCacheService,
    )

    return DefaultCategoryCacheService(
        settings=resolve_category_cache_settings(settings),
        api=api or build_categories_api(settings=settings),
        reporter=reporter,
    )
