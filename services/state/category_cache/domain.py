"""Domain contracts for category cache state and view filters."""

from __future__ import annotations

from typing import Callable

from pydantic import BaseModel, ConfigDict, field_validator

from resources.adapters.categories_api.adapter import (
    CategoryInput,
    CategoryRecord,
    CategoryStatus,
)

__all__ = [
    "CacheListener",
    "CacheState",
    "CategoryInput",
    "CategoryRecord",
    "CategoryStatus",
    "ViewFilter",
]


class CacheState(BaseModel):
    """Immutable snapshot of the cached collection."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    records: tuple[CategoryRecord, ...] = ()
    is_loading: bool = False


class ViewFilter(BaseModel):
    """Transient UI filter applied on top of cached records.

    An empty ``status_filter`` (``""`` or ``None``) means no status filter.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    query: str = ""
    status_filter: CategoryStatus | None = None

    @field_validator("status_filter", mode="before")
    @classmethod
    def _blank_status_means_any(cls, value: object) -> object:
        if isinstance(value, str) and value.strip() == "":
            return None
        return value


CacheListener = Callable[[CacheState], None]
