"""Batch observers: adapters and composition for progress/error hooks."""

from typing import List, Optional, Sequence

from avif_optimizer.domain.models import (
    ConcurrencyConfig, ProgressEvent, ErrorEvent, ProgressCallback, ErrorCallback
)
from avif_optimizer.domain.protocols import IBatchObserver, ILogger
from avif_optimizer.shared.logging import get_logger

logger = get_logger(__name__)


class CallbackObserver:
    """Adapts bare progress/error callables to the observer interface."""

    def __init__(
        self,
        on_progress: Optional[ProgressCallback] = None,
        on_error: Optional[ErrorCallback] = None
    ):
        self._on_progress = on_progress
        self._on_error = on_error

    def on_progress(self, event: ProgressEvent) -> None:
        if self._on_progress is not None:
            self._on_progress(event)

    def on_error(self, event: ErrorEvent) -> None:
        if self._on_error is not None:
            self._on_error(event)


class CompositeObserver:
    """
    Fans events out to several observers in registration order.

    An observer that raises is logged and skipped so the remaining observers
    and the batch itself carry on.
    """

    def __init__(self, observers: Sequence[IBatchObserver] = ()):
        self._observers: List[IBatchObserver] = list(observers)

    def add(self, observer: IBatchObserver) -> None:
        self._observers.append(observer)

    def __len__(self) -> int:
        return len(self._observers)

    def on_progress(self, event: ProgressEvent) -> None:
        for observer in self._observers:
            try:
                observer.on_progress(event)
            except Exception:
                logger.exception(f"Progress observer {observer!r} failed for item #{event.index}")

    def on_error(self, event: ErrorEvent) -> None:
        for observer in self._observers:
            try:
                observer.on_error(event)
            except Exception:
                logger.exception(f"Error observer {observer!r} failed for item #{event.index}")


class LoggingObserver:
    """Logs progress at debug level and item failures at warning level."""

    def __init__(self, log: Optional[ILogger] = None):
        self._logger = log or logger

    def on_progress(self, event: ProgressEvent) -> None:
        self._logger.debug(
            f"[{event.completed}/{event.total}] {event.item} done ({event.percentage:.1f}%)"
        )

    def on_error(self, event: ErrorEvent) -> None:
        self._logger.warning(
            f"[{event.completed}/{event.total}] {event.item} failed: {event.error}"
        )


def build_observer(config: ConcurrencyConfig) -> CompositeObserver:
    """Compose the callbacks and observers of a scheduler configuration."""
    composite = CompositeObserver()
    if config.on_progress is not None or config.on_error is not None:
        composite.add(CallbackObserver(config.on_progress, config.on_error))
    for observer in config.observers:
        composite.add(observer)
    return composite
