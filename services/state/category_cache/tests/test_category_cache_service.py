"""Behavior tests for the category cache implementation."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from packages.catalog_shared.envelope import EnvelopeMeta, new_meta
from packages.catalog_shared.errors import ErrorCategory, ErrorDetail, codes
from resources.adapters.categories_api import (
    CategoriesApi,
    CategoriesApiNotFoundError,
    CategoriesApiProtocolError,
    CategoriesApiTransportError,
    CategoriesApiValidationError,
    CategoryInput,
    CategoryRecord,
    CategoryStatus,
)
from services.state.category_cache import (
    CacheState,
    CategoryCacheSettings,
    DefaultCategoryCacheService,
)

_BOOKS = CategoryRecord(id=1, name="Books", status=CategoryStatus.ACTIVE)
_GAMES = CategoryRecord(id=2, name="Games", status=CategoryStatus.INACTIVE)


class _FakeCategoriesApi(CategoriesApi):
    """In-memory backend fake recording every call."""

    def __init__(self, records: list[CategoryRecord] | None = None) -> None:
        self.records: list[CategoryRecord] = list(records or [])
        self.next_id = max((record.id for record in self.records), default=0) + 1
        self.calls: list[tuple[Any, ...]] = []
        self.list_gates: list[asyncio.Event] = []
        self.raise_on_list: Exception | None = None
        self.raise_on_create: Exception | None = None
        self.raise_on_update: Exception | None = None
        self.raise_on_delete: Exception | None = None

    async def list_all(self) -> list[CategoryRecord]:
        self.calls.append(("list_all",))
        if self.raise_on_list is not None:
            raise self.raise_on_list
        snapshot = list(self.records)
        if self.list_gates:
            await self.list_gates.pop(0).wait()
        return snapshot

    async def search(self, *, query: str) -> list[CategoryRecord]:
        self.calls.append(("search", query))
        return [r for r in self.records if query.lower() in r.name.lower()]

    async def filter_by_status(
        self, *, status: CategoryStatus
    ) -> list[CategoryRecord]:
        self.calls.append(("filter_by_status", status))
        return [r for r in self.records if r.effective_status == status]

    async def create(self, *, category: CategoryInput) -> CategoryRecord:
        self.calls.append(("create", category))
        if self.raise_on_create is not None:
            raise self.raise_on_create
        # The server title-cases names; the create response echoes raw input.
        stored = CategoryRecord(
            id=self.next_id,
            name=category.name.title(),
            status=category.status or CategoryStatus.ACTIVE,
        )
        self.next_id += 1
        self.records.append(stored)
        return CategoryRecord(id=stored.id, name=category.name)

    async def update(
        self, *, category_id: int, category: CategoryInput
    ) -> CategoryRecord:
        self.calls.append(("update", category_id, category))
        if self.raise_on_update is not None:
            raise self.raise_on_update
        for index, record in enumerate(self.records):
            if record.id == category_id:
                self.records[index] = CategoryRecord(
                    id=category_id, name=category.name, status=category.status
                )
                return self.records[index]
        raise CategoriesApiNotFoundError(f"category {category_id} not found")

    async def delete(self, *, category_id: int) -> None:
        self.calls.append(("delete", category_id))
        if self.raise_on_delete is not None:
            raise self.raise_on_delete
        before = len(self.records)
        self.records = [r for r in self.records if r.id != category_id]
        if len(self.records) == before:
            raise CategoriesApiNotFoundError(f"category {category_id} not found")


class _RecordingReporter:
    """Error reporter fake capturing every report."""

    def __init__(self) -> None:
        self.reports: list[tuple[str, ErrorDetail, EnvelopeMeta]] = []

    def report(
        self, *, operation: str, error: ErrorDetail, meta: EnvelopeMeta
    ) -> None:
        self.reports.append((operation, error, meta))


def _cache(
    api: _FakeCategoriesApi,
    *,
    reporter: _RecordingReporter | None = None,
    read_ordering: str = "send_order",
) -> DefaultCategoryCacheService:
    return DefaultCategoryCacheService(
        settings=CategoryCacheSettings(read_ordering=read_ordering),
        api=api,
        reporter=reporter or _RecordingReporter(),
    )


def _loaded_cache(
    api: _FakeCategoriesApi, **kwargs: Any
) -> DefaultCategoryCacheService:
    cache = _cache(api, **kwargs)
    assert asyncio.run(cache.load()).ok
    api.calls.clear()
    return cache


def test_initial_state_is_empty_and_idle() -> None:
    """A new cache should hold no records and not be loading."""
    cache = _cache(_FakeCategoriesApi([_BOOKS]))

    assert cache.state == CacheState(records=(), is_loading=False)


def test_load_replaces_records_and_notifies_loading_transitions() -> None:
    """load should publish a loading state, then the fetched records."""
    cache = _cache(_FakeCategoriesApi([_BOOKS, _GAMES]))
    seen: list[CacheState] = []
    cache.subscribe(seen.append)

    result = asyncio.run(cache.load())

    assert result.ok
    assert result.payload == CacheState(records=(_BOOKS, _GAMES), is_loading=False)
    assert cache.state.records == (_BOOKS, _GAMES)
    assert seen == [
        CacheState(records=(), is_loading=True),
        CacheState(records=(_BOOKS, _GAMES), is_loading=False),
    ]


def test_load_failure_keeps_stale_records_and_reports_error() -> None:
    """A failed load should keep records, clear loading and report the error."""
    api = _FakeCategoriesApi([_BOOKS])
    reporter = _RecordingReporter()
    cache = _loaded_cache(api, reporter=reporter)
    before = cache.state.records
    api.raise_on_list = CategoriesApiTransportError("connection refused")

    result = asyncio.run(cache.load())

    assert not result.ok
    assert result.payload is None
    assert cache.state.records is before
    assert cache.state.is_loading is False
    error = result.errors[0]
    assert error.category == ErrorCategory.DEPENDENCY
    assert error.code == codes.DEPENDENCY_UNAVAILABLE
    assert error.retryable is True
    assert error.metadata["operation"] == "load"
    assert [(operation, err) for operation, err, _ in reporter.reports] == [
        ("load", error)
    ]


def test_create_reconciles_by_refetch_instead_of_appending_response() -> None:
    """create should refetch; the create response must never reach records."""
    api = _FakeCategoriesApi([_BOOKS])
    cache = _loaded_cache(api)
    seen: list[CacheState] = []
    cache.subscribe(seen.append)

    result = asyncio.run(cache.create(category={"name": "toys"}))

    assert result.ok
    assert [call[0] for call in api.calls] == ["create", "list_all"]
    toys = CategoryRecord(id=2, name="Toys", status=CategoryStatus.ACTIVE)
    assert cache.state.records == (_BOOKS, toys)
    assert all(state.records in {(_BOOKS,), (_BOOKS, toys)} for state in seen)


def test_create_rejected_by_server_leaves_records_untouched() -> None:
    """A server-side validation failure should not change records or loading."""
    api = _FakeCategoriesApi([_BOOKS, _GAMES])
    cache = _loaded_cache(api)
    before = cache.state.records
    api.raise_on_create = CategoriesApiValidationError("name already taken")

    result = asyncio.run(cache.create(category=CategoryInput(name="Toys")))

    assert not result.ok
    assert result.errors[0].category == ErrorCategory.VALIDATION
    assert result.errors[0].metadata["stage"] == "request"
    assert cache.state.records is before
    assert cache.state.is_loading is False
    assert [call[0] for call in api.calls] == ["create"]


def test_create_with_blank_name_is_rejected_without_remote_call() -> None:
    """Local validation failures should never reach the backend."""
    api = _FakeCategoriesApi([_BOOKS])
    reporter = _RecordingReporter()
    cache = _loaded_cache(api, reporter=reporter)

    result = asyncio.run(cache.create(category={"name": "   "}))

    assert not result.ok
    assert result.errors[0].category == ErrorCategory.VALIDATION
    assert result.errors[0].code == codes.INVALID_ARGUMENT
    assert result.errors[0].metadata["field"] == "category.name"
    assert api.calls == []
    assert reporter.reports[0][0] == "create"


def test_update_unknown_id_reports_not_found() -> None:
    """update of a missing id should fail with a not-found error."""
    api = _FakeCategoriesApi([_BOOKS])
    cache = _loaded_cache(api)
    before = cache.state.records

    result = asyncio.run(
        cache.update(category_id=42, category={"name": "Movies"})
    )

    assert not result.ok
    assert result.errors[0].category == ErrorCategory.NOT_FOUND
    assert cache.state.records is before


def test_update_refetches_collection() -> None:
    """A successful update should be followed by a full refetch."""
    api = _FakeCategoriesApi([_BOOKS, _GAMES])
    cache = _loaded_cache(api)

    result = asyncio.run(
        cache.update(
            category_id=2,
            category=CategoryInput(name="Board Games", status=CategoryStatus.ACTIVE),
        )
    )

    assert result.ok
    assert [call[0] for call in api.calls] == ["update", "list_all"]
    assert cache.state.records[1] == CategoryRecord(
        id=2, name="Board Games", status=CategoryStatus.ACTIVE
    )


def test_update_rejects_non_positive_id() -> None:
    """Ids must be positive integers."""
    api = _FakeCategoriesApi([_BOOKS])
    cache = _loaded_cache(api)

    result = asyncio.run(cache.update(category_id=0, category={"name": "x"}))

    assert not result.ok
    assert result.errors[0].metadata["field"] == "category_id"
    assert api.calls == []


def test_delete_takes_final_records_from_server() -> None:
    """After delete the cache should equal whatever the server now returns."""
    api = _FakeCategoriesApi([_BOOKS, _GAMES])
    cache = _loaded_cache(api)

    result = asyncio.run(cache.delete(category_id=1))

    assert result.ok
    assert cache.state.records == (_GAMES,)
    assert [call[0] for call in api.calls] == ["delete", "list_all"]


def test_delete_failure_leaves_records_identical() -> None:
    """A failed delete should leave the exact same records tuple."""
    api = _FakeCategoriesApi([_BOOKS])
    cache = _loaded_cache(api)
    before = cache.state.records
    api.raise_on_delete = CategoriesApiTransportError(
        "HTTP 500", retryable=True, status_code=500
    )

    result = asyncio.run(cache.delete(category_id=1))

    assert not result.ok
    assert result.errors[0].code == codes.DEPENDENCY_FAILURE
    assert cache.state.records is before


def test_reconcile_failure_is_reported_with_reconcile_stage() -> None:
    """If the refetch after a successful mutation fails, records stay stale."""
    api = _FakeCategoriesApi([_BOOKS, _GAMES])
    cache = _loaded_cache(api)
    before = cache.state.records
    api.raise_on_list = CategoriesApiProtocolError("bad envelope")

    result = asyncio.run(cache.delete(category_id=2))

    assert not result.ok
    assert api.records == [_BOOKS]
    assert cache.state.records is before
    assert cache.state.is_loading is False
    error = result.errors[0]
    assert error.metadata["stage"] == "reconcile"
    assert error.code == codes.DEPENDENCY_PROTOCOL
    assert error.retryable is False


def test_search_and_filter_remote_replace_records() -> None:
    """Server-side search/filter results should replace records wholesale."""
    api = _FakeCategoriesApi([_BOOKS, _GAMES])
    cache = _loaded_cache(api)

    searched = asyncio.run(cache.search_remote(query="gam"))
    assert searched.ok
    assert cache.state.records == (_GAMES,)

    filtered = asyncio.run(cache.filter_remote(status="active"))
    assert filtered.ok
    assert cache.state.records == (_BOOKS,)
    assert api.calls == [
        ("search", "gam"),
        ("filter_by_status", CategoryStatus.ACTIVE),
    ]


def test_filter_remote_rejects_unknown_status() -> None:
    """Unknown statuses should fail validation before any remote call."""
    api = _FakeCategoriesApi([_BOOKS])
    cache = _loaded_cache(api)

    result = asyncio.run(cache.filter_remote(status="archived"))

    assert not result.ok
    assert result.errors[0].category == ErrorCategory.VALIDATION
    assert api.calls == []


def test_unexpected_exception_becomes_internal_error() -> None:
    """Non-adapter exceptions should still be contained as internal errors."""
    api = _FakeCategoriesApi([_BOOKS])
    cache = _loaded_cache(api)
    api.raise_on_list = RuntimeError("boom")

    result = asyncio.run(cache.load())

    assert not result.ok
    assert result.errors[0].category == ErrorCategory.INTERNAL
    assert result.errors[0].metadata["exception_type"] == "RuntimeError"


def test_caller_metadata_is_returned_and_reported() -> None:
    """Results and reports should carry the caller's metadata."""
    api = _FakeCategoriesApi()
    reporter = _RecordingReporter()
    cache = _cache(api, reporter=reporter)
    meta = new_meta(source="test", trace_id="trace-1")
    api.raise_on_list = CategoriesApiTransportError("down")

    result = asyncio.run(cache.load(meta=meta))

    assert result.metadata is meta
    assert reporter.reports[0][2] is meta


def _overlapping_loads(read_ordering: str) -> tuple[CacheState, list[bool]]:
    """Start two loads, finish the newer first, and return the final state."""
    api = _FakeCategoriesApi([_BOOKS, _GAMES])
    cache = _cache(api, read_ordering=read_ordering)
    loading: list[bool] = []

    async def _go() -> CacheState:
        older_gate, newer_gate = asyncio.Event(), asyncio.Event()
        api.list_gates = [older_gate, newer_gate]
        older = asyncio.create_task(cache.load())
        await asyncio.sleep(0)
        api.records = [_GAMES]
        newer = asyncio.create_task(cache.load())
        await asyncio.sleep(0)

        newer_gate.set()
        assert (await newer).ok
        loading.append(cache.state.is_loading)
        older_gate.set()
        assert (await older).ok
        loading.append(cache.state.is_loading)
        return cache.state

    return asyncio.run(_go()), loading


def test_send_order_discards_late_older_read() -> None:
    """An older read finishing last must not overwrite newer records."""
    state, loading = _overlapping_loads("send_order")

    assert state.records == (_GAMES,)
    assert loading == [True, False]


def test_completion_order_applies_last_arriving_read() -> None:
    """In completion order the last response wins, even if it is older."""
    state, loading = _overlapping_loads("completion_order")

    assert state.records == (_BOOKS, _GAMES)
    assert loading == [True, False]


def test_failing_listener_does_not_break_operation_or_other_listeners() -> None:
    """Listener exceptions should be isolated."""
    cache = _cache(_FakeCategoriesApi([_BOOKS]))
    seen: list[CacheState] = []

    def _broken(state: CacheState) -> None:
        raise RuntimeError("render failed")

    cache.subscribe(_broken)
    cache.subscribe(seen.append)

    result = asyncio.run(cache.load())

    assert result.ok
    assert seen[-1].records == (_BOOKS,)


def test_unsubscribe_stops_notifications() -> None:
    """Unsubscribed listeners should not be called again."""
    cache = _cache(_FakeCategoriesApi([_BOOKS]))
    seen: list[CacheState] = []
    unsubscribe = cache.subscribe(seen.append)
    unsubscribe()
    unsubscribe()

    asyncio.run(cache.load())

    assert seen == []


def test_cancelled_load_clears_loading_flag() -> None:
    """A cancelled read should no longer count as outstanding."""
    api = _FakeCategoriesApi([_BOOKS])
    cache = _cache(api)

    async def _go() -> tuple[bool, bool, CacheState]:
        api.list_gates = [asyncio.Event()]
        task = asyncio.create_task(cache.load())
        await asyncio.sleep(0)
        loading_while_pending = cache.state.is_loading
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        loading_after_cancel = cache.state.is_loading
        assert (await cache.load()).ok
        return loading_while_pending, loading_after_cancel, cache.state

    pending, after_cancel, state = asyncio.run(_go())

    assert pending is True
    assert after_cancel is False
    assert state == CacheState(records=(_BOOKS,), is_loading=False)
