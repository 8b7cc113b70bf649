"""Transport-agnostic categories API contracts and DTOs."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CategoriesApiError(Exception):
    """Base exception for categories API adapter failures."""


class CategoriesApiTransportError(CategoriesApiError):
    """Network or HTTP-level failure talking to the categories backend."""

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = True,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code


class CategoriesApiValidationError(CategoriesApiError):
    """Backend rejected the submitted payload shape or content."""


class CategoriesApiNotFoundError(CategoriesApiError):
    """Target category id does not exist on the backend."""


class CategoriesApiProtocolError(CategoriesApiError):
    """Backend answered successfully with a body that breaks the wire contract."""


class CategoryStatus(StrEnum):
    """Lifecycle status of one category."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class CategoryRecord(BaseModel):
    """One category exactly as the backend returned it."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str = Field(min_length=1)
    status: CategoryStatus | None = None

    @property
    def effective_status(self) -> CategoryStatus:
        """Return ``status``, treating an absent value as active."""
        return self.status or CategoryStatus.ACTIVE


class CategoryInput(BaseModel):
    """Create/update payload for one category."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    status: CategoryStatus | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> object:
        """Normalize surrounding whitespace before the length check."""
        if isinstance(value, str):
            return value.strip()
        return value


class CategoriesApi(Protocol):
    """Remote operations against the ``/categories`` collection."""

    async def list_all(self) -> list[CategoryRecord]:
        """Return the whole collection in server order."""

    async def search(self, *, query: str) -> list[CategoryRecord]:
        """Return records matched by the backend's name search."""

    async def filter_by_status(
        self, *, status: CategoryStatus
    ) -> list[CategoryRecord]:
        """Return records with the given status."""

    async def create(self, *, category: CategoryInput) -> CategoryRecord:
        """Create one category and return the stored record."""

    async def update(
        self, *, category_id: int, category: CategoryInput
    ) -> CategoryRecord:
        """Replace name/status of one category and return the stored record."""

    async def delete(self, *, category_id: int) -> None:
        """Delete one category."""
