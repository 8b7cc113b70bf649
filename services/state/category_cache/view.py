"""Derived view over cached category records.

``derive_view`` is a pure projection; ``DerivedView`` keeps one projection
current by listening to a cache and to its own filter changes.
"""

from __future__ import annotations

from typing import Callable, Iterable

from services.state.category_cache.domain import (
    CacheState,
    CategoryRecord,
    CategoryStatus,
    ViewFilter,
)
from services.state.category_cache.listeners import ListenerRegistry
from services.state.category_cache.service import CategoryCacheService

ViewListener = Callable[[tuple[CategoryRecord, ...]], None]


def derive_view(
    records: Iterable[CategoryRecord], view_filter: ViewFilter | None = None
) -> tuple[CategoryRecord, ...]:
    """Return records matching ``view_filter``, in their original order.

    A non-blank query keeps records whose case-folded name contains the
    case-folded, stripped query. A status filter compares against each
    record's effective status. Both predicates must hold.
    """
    active = view_filter or ViewFilter()
    query = active.query.strip().casefold()
    status = active.status_filter
    return tuple(
        record
        for record in records
        if (query == "" or query in record.name.casefold())
        and (status is None or record.effective_status == status)
    )


class DerivedView:
    """Projection of one cache kept current across state and filter changes."""

    def __init__(
        self,
        cache: CategoryCacheService,
        *,
        view_filter: ViewFilter | None = None,
    ) -> None:
        self._cache = cache
        self._filter = view_filter or ViewFilter()
        self._records = derive_view(cache.state.records, self._filter)
        self._listeners: ListenerRegistry[tuple[CategoryRecord, ...]] = (
            ListenerRegistry(owner="derived_view")
        )
        self._unsubscribe: Callable[[], None] | None = cache.subscribe(
            self._on_cache_state
        )

    @property
    def records(self) -> tuple[CategoryRecord, ...]:
        """Return the current projection."""
        return self._records

    @property
    def view_filter(self) -> ViewFilter:
        """Return the active filter."""
        return self._filter

    @property
    def is_loading(self) -> bool:
        """Return whether the underlying cache has a read outstanding."""
        return self._cache.state.is_loading

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """Register a projection listener; return a callable that unregisters it."""
        return self._listeners.subscribe(listener)

    def set_filter(self, view_filter: ViewFilter) -> None:
        """Replace the whole filter and recompute."""
        self._filter = view_filter
        self._recompute(self._cache.state.records)

    def set_query(self, query: str) -> None:
        """Replace the free-text query and recompute."""
        self.set_filter(self._filter.model_copy(update={"query": query}))

    def set_status_filter(self, status: CategoryStatus | str | None) -> None:
        """Replace the status filter (``""``/``None`` clears it) and recompute."""
        self.set_filter(
            ViewFilter(query=self._filter.query, status_filter=status)
        )

    def close(self) -> None:
        """Stop following the cache."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_cache_state(self, state: CacheState) -> None:
        self._recompute(state.records)

    def _recompute(self, records: tuple[CategoryRecord, ...]) -> None:
        projected = derive_view(records, self._filter)
        if projected == self._records:
            return
        self._records = projected
        self._listeners.notify(projected)
