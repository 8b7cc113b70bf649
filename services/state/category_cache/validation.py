"""Request validation models for category cache public API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from services.state.category_cache.domain import CategoryInput, CategoryStatus


class _CacheRequest(BaseModel):
    """Base request model for cache operations."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class CreateCategoryRequest(_CacheRequest):
    """Validate one create request payload."""

    category: CategoryInput


class UpdateCategoryRequest(_CacheRequest):
    """Validate one update request payload."""

    category_id: int = Field(gt=0)
    category: CategoryInput


class DeleteCategoryRequest(_CacheRequest):
    """Validate one delete request payload."""

    category_id: int = Field(gt=0)


class SearchCategoriesRequest(_CacheRequest):
    """Validate one server-side search request payload."""

    query: str


class FilterCategoriesRequest(_CacheRequest):
    """Validate one server-side status filter request payload."""

    status: CategoryStatus
