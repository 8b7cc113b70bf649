"""Operation metadata attached to every result."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4


@dataclass(frozen=True)
class EnvelopeMeta:
    """Correlation metadata for one public operation call."""

    envelope_id: str
    trace_id: str
    timestamp: datetime
    source: str
    principal: str


def new_meta(
    *,
    source: str,
    principal: str = "operator",
    trace_id: str | None = None,
    envelope_id: str | None = None,
    timestamp: datetime | None = None,
) -> EnvelopeMeta:
    """Build ``EnvelopeMeta`` with safe defaults for IDs and timestamp."""
    return EnvelopeMeta(
        envelope_id=envelope_id or _new_id(),
        trace_id=trace_id or _new_id(),
        timestamp=_utc_now() if timestamp is None else _normalize_utc(timestamp),
        source=source,
        principal=principal,
    )


def _new_id() -> str:
    """Return a compact random identifier."""
    return uuid4().hex


def _utc_now() -> datetime:
    """Return current UTC timestamp."""
    return datetime.now(UTC)


def _normalize_utc(value: datetime) -> datetime:
    """Normalize naive/aware datetimes to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
