"""Categories API adapter over the shared async HTTP client."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Mapping
from typing import Any

from pydantic import ValidationError

from packages.catalog_shared.http import (
    AsyncHttpClient,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
)
from packages.catalog_shared.logging import get_logger, public_api_instrumented
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
from resources.adapters.categories_api.component import RESOURCE_COMPONENT_ID
from resources.adapters.categories_api.config import CategoriesApiSettings

_LOGGER = get_logger(__name__)

_COLLECTION_PATH = "/categories"
_SEARCH_PATH = "/categories/search"
_VALIDATION_STATUSES = frozenset({400, 422})
_NOT_FOUND_STATUS = 404
_MAX_DETAIL_CHARS = 200


class HttpCategoriesApi(CategoriesApi):
    """Categories adapter speaking the ``{data: ...}`` JSON wire format."""

    def __init__(
        self,
        *,
        settings: CategoriesApiSettings,
        client: AsyncHttpClient | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._http = client or AsyncHttpClient(
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
            headers=settings.request_headers(),
            follow_redirects=settings.follow_redirects,
        )

    async def aclose(self) -> None:
        """Close the HTTP client when this adapter created it."""
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> HttpCategoriesApi:
        """Enter async context manager scope."""
        return self

    async def __aexit__(self, *_: object) -> None:
        """Exit async context manager scope and close owned resources."""
        await self.aclose()

    @public_api_instrumented(logger=_LOGGER, component_id=RESOURCE_COMPONENT_ID)
    async def list_all(self) -> list[CategoryRecord]:
        """Return the whole collection in server order."""
        payload = await self._call(
            self._http.get_json(_COLLECTION_PATH), operation="list_all"
        )
        return _decode_records(payload, operation="list_all")

    @public_api_instrumented(
        logger=_LOGGER, component_id=RESOURCE_COMPONENT_ID, id_fields=("query",)
    )
    async def search(self, *, query: str) -> list[CategoryRecord]:
        """Return records matched by the backend's name search."""
        payload = await self._call(
            self._http.get_json(_SEARCH_PATH, params={"query": query}),
            operation="search",
        )
        return _decode_records(payload, operation="search")

    @public_api_instrumented(
        logger=_LOGGER, component_id=RESOURCE_COMPONENT_ID, id_fields=("status",)
    )
    async def filter_by_status(
        self, *, status: CategoryStatus
    ) -> list[CategoryRecord]:
        """Return records with the given status."""
        payload = await self._call(
            self._http.get_json(
                _COLLECTION_PATH, params={"status": CategoryStatus(status).value}
            ),
            operation="filter_by_status",
        )
        return _decode_records(payload, operation="filter_by_status")

    @public_api_instrumented(logger=_LOGGER, component_id=RESOURCE_COMPONENT_ID)
    async def create(self, *, category: CategoryInput) -> CategoryRecord:
        """Create one category and return the stored record."""
        payload = await self._call(
            self._http.post_json(
                _COLLECTION_PATH,
                json=category.model_dump(mode="json", exclude_none=True),
            ),
            operation="create",
        )
        return _decode_record(payload, operation="create")

    @public_api_instrumented(
        logger=_LOGGER, component_id=RESOURCE_COMPONENT_ID, id_fields=("category_id",)
    )
    async def update(
        self, *, category_id: int, category: CategoryInput
    ) -> CategoryRecord:
        """Replace name/status of one category and return the stored record."""
        body = {"id": category_id, **category.model_dump(mode="json", exclude_none=True)}
        payload = await self._call(
            self._http.put_json(
                _COLLECTION_PATH, json=body, params={"id": category_id}
            ),
            operation="update",
        )
        return _decode_record(payload, operation="update")

    @public_api_instrumented(
        logger=_LOGGER, component_id=RESOURCE_COMPONENT_ID, id_fields=("category_id",)
    )
    async def delete(self, *, category_id: int) -> None:
        """Delete one category; any response body is ignored."""
        await self._call(
            self._http.delete_json(_COLLECTION_PATH, params={"id": category_id}),
            operation="delete",
        )

    async def _call(self, request: Awaitable[Any], *, operation: str) -> Any:
        """Await one client request and translate shared HTTP errors."""
        try:
            return await request
        except HttpStatusError as exc:
            raise _status_error(operation=operation, exc=exc) from exc
        except HttpRequestError as exc:
            raise CategoriesApiTransportError(
                f"{operation} request failed: {exc.message}",
                retryable=exc.retryable,
            ) from exc
        except HttpJsonDecodeError as exc:
            raise CategoriesApiProtocolError(
                f"{operation} returned a non-JSON body"
            ) from exc


def _status_error(*, operation: str, exc: HttpStatusError) -> CategoriesApiError:
    """Map one non-success HTTP status to the adapter error taxonomy."""
    detail = _server_detail(exc.response_body)
    message = f"{operation} failed with HTTP {exc.status_code}"
    if detail:
        message = f"{message}: {detail}"

    if exc.status_code in _VALIDATION_STATUSES:
        return CategoriesApiValidationError(message)
    if exc.status_code == _NOT_FOUND_STATUS:
        return CategoriesApiNotFoundError(message)
    return CategoriesApiTransportError(
        message, retryable=exc.retryable, status_code=exc.status_code
    )


def _server_detail(body: str) -> str:
    """Extract a short human-readable reason from an error response body."""
    text = body.strip()
    if text == "":
        return ""
    try:
        parsed = json.loads(text)
    except ValueError:
        return text[:_MAX_DETAIL_CHARS]
    if isinstance(parsed, Mapping):
        for key in ("message", "error", "detail"):
            value = parsed.get(key)
            if isinstance(value, str) and value.strip() != "":
                return value.strip()[:_MAX_DETAIL_CHARS]
    return text[:_MAX_DETAIL_CHARS]


def _unwrap_data(payload: Any, *, operation: str) -> Any:
    """Return the ``data`` member of one response envelope."""
    if not isinstance(payload, Mapping) or "data" not in payload:
        raise CategoriesApiProtocolError(
            f"{operation} response must be an object with a data member"
        )
    return payload["data"]


def _decode_records(payload: Any, *, operation: str) -> list[CategoryRecord]:
    """Decode ``{data: [...]}`` into records, preserving server order."""
    data = _unwrap_data(payload, operation=operation)
    if not isinstance(data, list):
        raise CategoriesApiProtocolError(f"{operation} response data must be a list")
    try:
        return [CategoryRecord.model_validate(item) for item in data]
    except ValidationError as exc:
        raise CategoriesApiProtocolError(
            f"{operation} response contains an invalid category: {exc.error_count()} error(s)"
        ) from exc


def _decode_record(payload: Any, *, operation: str) -> CategoryRecord:
    """Decode ``{data: {...}}`` into one record."""
    data = _unwrap_data(payload, operation=operation)
    try:
        return CategoryRecord.model_validate(data)
    except ValidationError as exc:
        raise CategoriesApiProtocolError(
            f"{operation} response contains an invalid category: {exc.error_count()} error(s)"
        ) from exc
