"""Error reporting collaborator for failed cache operations."""

from __future__ import annotations

from typing import Any, Protocol

from packages.catalog_shared.envelope import EnvelopeMeta
from packages.catalog_shared.errors import ErrorDetail
from packages.catalog_shared.logging import fields, get_logger, log_context


class ErrorReporter(Protocol):
    """Receives every error the cache contains at its operation boundary."""

    def report(
        self, *, operation: str, error: ErrorDetail, meta: EnvelopeMeta
    ) -> None:
        """Surface one failure to the user or an operator."""


class LoggingErrorReporter:
    """Report failures as structured warning logs."""

    def __init__(self, *, logger: Any | None = None) -> None:
        self._logger = logger or get_logger(__name__)

    def report(
        self, *, operation: str, error: ErrorDetail, meta: EnvelopeMeta
    ) -> None:
        """Emit one warning carrying the error code, category and trace id."""
        with log_context(
            {
                fields.OPERATION: operation,
                fields.TRACE_ID: meta.trace_id,
                fields.ENVELOPE_ID: meta.envelope_id,
                fields.ERROR_CATEGORY: error.category.value,
                fields.ERRORS: [f"{error.code}: {error.message}"],
                **dict(error.metadata),
            }
        ):
            self._logger.warning("Category cache operation failed")
