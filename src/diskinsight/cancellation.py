"""Cooperative cancellation shared by the aggregator and analyzers."""

import threading


class OperationCancelled(Exception):
    """Raised when a scan observes a cancelled token."""


class CancellationToken:
    """Thread-safe cancellation flag checked at every suspension point."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelled if cancellation was requested."""
        if self._event.is_set():
            raise OperationCancelled("Operation was cancelled")

    def wait(self, timeout: float) -> bool:
        """Block up to timeout seconds; True if cancelled meanwhile."""
        return self._event.wait(timeout)
