"""Tests for result model and builder behavior."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from packages.catalog_shared.envelope import EnvelopeMeta, failure, new_meta, success
from packages.catalog_shared.errors import ErrorCategory, ErrorDetail


def _meta() -> EnvelopeMeta:
    """Return deterministic metadata for result tests."""
    return new_meta(
        source="service_category_cache",
        principal="operator",
        timestamp=datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC),
        envelope_id="env-1",
        trace_id="trace-1",
    )


def _error(code: str = "VALIDATION_ERROR") -> ErrorDetail:
    """Return a deterministic error detail for result tests."""
    return ErrorDetail(
        code=code,
        message="Invalid input",
        category=ErrorCategory.VALIDATION,
        retryable=False,
    )


def test_success_builder_returns_ok_result_with_payload() -> None:
    """success should build an ok result with payload and no errors."""
    result = success(meta=_meta(), payload={"id": 1})

    assert result.ok is True
    assert result.has_payload is True
    assert result.payload == {"id": 1}
    assert result.errors == []


def test_failure_builder_returns_non_ok_result_with_errors() -> None:
    """failure should build a non-ok result containing provided errors."""
    result = failure(meta=_meta(), errors=(_error("DEPENDENCY_UNAVAILABLE"),))

    assert result.ok is False
    assert result.has_payload is False
    assert [item.code for item in result.errors] == ["DEPENDENCY_UNAVAILABLE"]


def test_failure_builder_requires_at_least_one_error() -> None:
    """failure without errors would be indistinguishable from success."""
    with pytest.raises(ValueError):
        failure(meta=_meta(), errors=[])


def test_new_meta_generates_ids_and_normalizes_timestamps_to_utc() -> None:
    """new_meta should fill ids and convert timestamps to UTC."""
    first = new_meta(source="cli")
    second = new_meta(source="cli")
    shifted = new_meta(
        source="cli",
        timestamp=datetime(2026, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2))),
    )
    naive = new_meta(source="cli", timestamp=datetime(2026, 1, 1, 12, 0))

    assert first.trace_id != second.trace_id
    assert first.envelope_id != first.trace_id
    assert first.principal == "operator"
    assert shifted.timestamp == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
    assert naive.timestamp.tzinfo is UTC
