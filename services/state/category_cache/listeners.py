"""Listener registry with per-listener failure isolation."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from packages.catalog_shared.logging import fields, get_logger, log_context

_LOGGER = get_logger(__name__)

T = TypeVar("T")


class ListenerRegistry(Generic[T]):
    """Ordered set of callbacks notified with one value per change."""

    def __init__(self, *, owner: str) -> None:
        self._owner = owner
        self._listeners: list[Callable[[T], None]] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, value: T) -> None:
        """Call every listener; a failing listener is logged and skipped."""
        for listener in tuple(self._listeners):
            try:
                listener(value)
            except Exception as exc:  # noqa: BLE001
                with log_context(
                    {
                        fields.COMPONENT_ID: self._owner,
                        fields.LISTENER: getattr(
                            listener, "__qualname__", type(listener).__name__
                        ),
                        fields.ERRORS: [f"{type(exc).__name__}: {exc}"],
                    }
                ):
                    _LOGGER.warning("State listener failed", exc_info=exc)
