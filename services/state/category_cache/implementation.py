"""Concrete category cache implementation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from packages.catalog_shared.envelope import (
    EnvelopeMeta,
    Result,
    failure,
    new_meta,
    success,
)
from packages.catalog_shared.errors import (
    ErrorDetail,
    codes,
    dependency_error,
    exception_to_error,
    not_found_error,
    validation_error,
)
from packages.catalog_shared.logging import (
    fields,
    get_logger,
    log_context,
    public_api_instrumented,
)
from resources.adapters.categories_api.adapter import (
    CategoriesApi,
    CategoriesApiNotFoundError,
    CategoriesApiProtocolError,
    CategoriesApiTransportError,
    CategoriesApiValidationError,
)
from services.state.category_cache.component import SERVICE_COMPONENT_ID
from services.state.category_cache.config import CategoryCacheSettings
from services.state.category_cache.domain import (
    CacheListener,
    CacheState,
    CategoryInput,
    CategoryRecord,
    CategoryStatus,
)
from services.state.category_cache.listeners import ListenerRegistry
from services.state.category_cache.reporting import (
    ErrorReporter,
    LoggingErrorReporter,
)
from services.state.category_cache.service import CategoryCacheService
from services.state.category_cache.validation import (
    CreateCategoryRequest,
    DeleteCategoryRequest,
    FilterCategoriesRequest,
    SearchCategoriesRequest,
    UpdateCategoryRequest,
)

_LOGGER = get_logger(__name__)

_STAGE_REQUEST = "request"
_STAGE_RECONCILE = "reconcile"

TRequest = TypeVar("TRequest", bound=BaseModel)


class DefaultCategoryCacheService(CategoryCacheService):
    """Single-writer cache over one ``CategoriesApi``.

    State changes happen synchronously between awaits, so overlapping
    operations on one event loop never observe a partial write.
    """

    def __init__(
        self,
        *,
        settings: CategoryCacheSettings,
        api: CategoriesApi,
        reporter: ErrorReporter | None = None,
    ) -> None:
        self._settings = settings
        self._api = api
        self._reporter = reporter or LoggingErrorReporter()
        self._state = CacheState()
        self._listeners: ListenerRegistry[CacheState] = ListenerRegistry(
            owner=SERVICE_COMPONENT_ID
        )
        # Read tickets are issued in send order; 0 means "initial empty state".
        self._last_ticket = 0
        self._applied_ticket = 0
        self._reads_in_flight = 0

    @property
    def state(self) -> CacheState:
        """Return the current immutable cache snapshot."""
        return self._state

    def subscribe(self, listener: CacheListener) -> Callable[[], None]:
        """Register a state listener; return a callable that unregisters it."""
        return self._listeners.subscribe(listener)

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    async def load(self, *, meta: EnvelopeMeta | None = None) -> Result[CacheState]:
        """Replace cached records with a fresh full read."""
        return await self._read(
            meta=self._meta(meta),
            operation="load",
            fetch=self._api.list_all,
            stage=_STAGE_REQUEST,
        )

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    async def create(
        self,
        *,
        category: CategoryInput | Mapping[str, object],
        meta: EnvelopeMeta | None = None,
    ) -> Result[CacheState]:
        """Create one category, then reconcile by refetch."""
        resolved_meta = self._meta(meta)
        request, errors = _validate_request(
            model=CreateCategoryRequest, payload={"category": _as_payload(category)}
        )
        if errors:
            return self._reject(meta=resolved_meta, operation="create", errors=errors)
        assert request is not None

        return await self._mutate(
            meta=resolved_meta,
            operation="create",
            call=lambda: self._api.create(category=request.category),
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=SERVICE_COMPONENT_ID, id_fields=("category_id",)
    )
    async def update(
        self,
        *,
        category_id: int,
        category: CategoryInput | Mapping[str, object],
        meta: EnvelopeMeta | None = None,
    ) -> Result[CacheState]:
        """Update one category, then reconcile by refetch."""
        resolved_meta = self._meta(meta)
        request, errors = _validate_request(
            model=UpdateCategoryRequest,
            payload={"category_id": category_id, "category": _as_payload(category)},
        )
        if errors:
            return self._reject(meta=resolved_meta, operation="update", errors=errors)
        assert request is not None

        return await self._mutate(
            meta=resolved_meta,
            operation="update",
            call=lambda: self._api.update(
                category_id=request.category_id, category=request.category
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=SERVICE_COMPONENT_ID, id_fields=("category_id",)
    )
    async def delete(
        self, *, category_id: int, meta: EnvelopeMeta | None = None
    ) -> Result[CacheState]:
        """Delete one category, then reconcile by refetch."""
        resolved_meta = self._meta(meta)
        request, errors = _validate_request(
            model=DeleteCategoryRequest, payload={"category_id": category_id}
        )
        if errors:
            return self._reject(meta=resolved_meta, operation="delete", errors=errors)
        assert request is not None

        return await self._mutate(
            meta=resolved_meta,
            operation="delete",
            call=lambda: self._api.delete(category_id=request.category_id),
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=SERVICE_COMPONENT_ID, id_fields=("query",)
    )
    async def search_remote(
        self, *, query: str, meta: EnvelopeMeta | None = None
    ) -> Result[CacheState]:
        """Replace cached records with the server's search result."""
        resolved_meta = self._meta(meta)
        request, errors = _validate_request(
            model=SearchCategoriesRequest, payload={"query": query}
        )
        if errors:
            return self._reject(
                meta=resolved_meta, operation="search_remote", errors=errors
            )
        assert request is not None

        return await self._read(
            meta=resolved_meta,
            operation="search_remote",
            fetch=lambda: self._api.search(query=request.query),
            stage=_STAGE_REQUEST,
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=SERVICE_COMPONENT_ID, id_fields=("status",)
    )
    async def filter_remote(
        self,
        *,
        status: CategoryStatus | str,
        meta: EnvelopeMeta | None = None,
    ) -> Result[CacheState]:
        """Replace cached records with the server's status-filtered result."""
        resolved_meta = self._meta(meta)
        request, errors = _validate_request(
            model=FilterCategoriesRequest, payload={"status": status}
        )
        if errors:
            return self._reject(
                meta=resolved_meta, operation="filter_remote", errors=errors
            )
        assert request is not None

        return await self._read(
            meta=resolved_meta,
            operation="filter_remote",
            fetch=lambda: self._api.filter_by_status(status=request.status),
            stage=_STAGE_REQUEST,
        )

    async def _mutate(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        call: Callable[[], Awaitable[object]],
    ) -> Result[CacheState]:
        """Run one remote mutation, then refetch the whole collection."""
        try:
            await call()
        except Exception as exc:  # noqa: BLE001
            return self._fail(
                meta=meta, operation=operation, exc=exc, stage=_STAGE_REQUEST
            )

        return await self._read(
            meta=meta,
            operation=operation,
            fetch=self._api.list_all,
            stage=_STAGE_RECONCILE,
        )

    async def _read(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        fetch: Callable[[], Awaitable[list[CategoryRecord]]],
        stage: str,
    ) -> Result[CacheState]:
        """Run one read and replace records wholesale when it may be applied."""
        self._last_ticket += 1
        ticket = self._last_ticket
        self._reads_in_flight += 1
        self._set_state(self._state.model_copy(update={"is_loading": True}))

        try:
            records = await fetch()
        except Exception as exc:  # noqa: BLE001
            self._release_read()
            return self._fail(meta=meta, operation=operation, exc=exc, stage=stage)
        except BaseException:
            # Cancellation still ends this read.
            self._release_read()
            raise

        update: dict[str, Any] = {}
        if self._may_apply(ticket):
            self._applied_ticket = ticket
            update["records"] = tuple(records)
        else:
            with log_context(
                {
                    fields.OPERATION: operation,
                    fields.READ_TICKET: ticket,
                    fields.TRACE_ID: meta.trace_id,
                }
            ):
                _LOGGER.info("Discarded read response older than current records")
        self._release_read(update)
        return success(meta=meta, payload=self._state)

    def _release_read(self, update: dict[str, Any] | None = None) -> None:
        """End one outstanding read and publish the resulting state."""
        self._reads_in_flight -= 1
        self._set_state(
            self._state.model_copy(
                update={**(update or {}), "is_loading": self._reads_in_flight > 0}
            )
        )

    def _may_apply(self, ticket: int) -> bool:
        """Return whether a finished read may replace the current records."""
        if self._settings.read_ordering == "completion_order":
            return True
        return ticket > self._applied_ticket

    def _set_state(self, state: CacheState) -> None:
        """Swap the snapshot and notify listeners when it actually changed."""
        if state == self._state:
            return
        self._state = state
        self._listeners.notify(state)

    def _fail(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        exc: Exception,
        stage: str,
    ) -> Result[CacheState]:
        """Normalize, report and return one caught exception."""
        error = _exception_to_error(
            exc, metadata={fields.OPERATION: operation, fields.STAGE: stage}
        )
        return self._reject(meta=meta, operation=operation, errors=[error])

    def _reject(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        errors: list[ErrorDetail],
    ) -> Result[CacheState]:
        """Report every error and return a failed result with no payload."""
        for error in errors:
            try:
                self._reporter.report(operation=operation, error=error, meta=meta)
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Error reporter failed")
        return failure(meta=meta, errors=errors)

    def _meta(self, meta: EnvelopeMeta | None) -> EnvelopeMeta:
        """Return caller metadata or a fresh one sourced from this cache."""
        if meta is not None:
            return meta
        return new_meta(source=self._settings.source)


def _as_payload(category: CategoryInput | Mapping[str, object]) -> object:
    """Return a validation-ready payload for one category input."""
    if isinstance(category, CategoryInput):
        return category.model_dump(mode="python")
    return category


def _validate_request(
    *, model: type[TRequest], payload: Mapping[str, object]
) -> tuple[TRequest | None, list[ErrorDetail]]:
    """Validate one request payload and map failures to validation errors."""
    try:
        return model.model_validate(dict(payload)), []
    except ValidationError as exc:
        return None, [
            validation_error(
                f"{_location(issue['loc'])}: {issue['msg']}",
                code=codes.INVALID_ARGUMENT,
                metadata={"field": _location(issue["loc"])},
            )
            for issue in exc.errors()
        ]


def _location(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic error location as a dotted field path."""
    return ".".join(str(part) for part in loc) or "request"


def _exception_to_error(exc: Exception, *, metadata: Mapping[str, str]) -> ErrorDetail:
    """Map adapter exceptions to shared errors, falling back to generic rules."""
    merged = {"exception_type": type(exc).__name__, **dict(metadata)}

    if isinstance(exc, CategoriesApiNotFoundError):
        return not_found_error(
            str(exc), code=codes.RESOURCE_NOT_FOUND, metadata=merged
        )

    if isinstance(exc, CategoriesApiValidationError):
        return validation_error(str(exc), metadata=merged)

    if isinstance(exc, CategoriesApiTransportError):
        code = (
            codes.DEPENDENCY_UNAVAILABLE
            if exc.status_code is None
            else codes.DEPENDENCY_FAILURE
        )
        return dependency_error(
            str(exc), code=code, retryable=exc.retryable, metadata=merged
        )

    if isinstance(exc, CategoriesApiProtocolError):
        return dependency_error(
            str(exc),
            code=codes.DEPENDENCY_PROTOCOL,
            retryable=False,
            metadata=merged,
        )

    return exception_to_error(exc, metadata=metadata)
