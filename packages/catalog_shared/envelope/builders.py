"""Convenience constructors for typed results."""

from __future__ import annotations

from typing import Iterable, TypeVar

from packages.catalog_shared.errors import ErrorDetail

from .meta import EnvelopeMeta
from .result import Result


T = TypeVar("T")


def success(*, meta: EnvelopeMeta, payload: T) -> Result[T]:
    """Build a successful result with payload and no errors."""
    return Result[T](metadata=meta, payload=payload, errors=[])


def failure(
    *,
    meta: EnvelopeMeta,
    errors: Iterable[ErrorDetail],
    payload: T | None = None,
) -> Result[T]:
    """Build a failed result with one or more errors."""
    normalized = list(errors)
    if not normalized:
        raise ValueError("failure result requires at least one error")
    return Result[T](metadata=meta, payload=payload, errors=normalized)
