"""Cooperative cancellation for long-running operations."""

from __future__ import annotations

import threading
import time


class CancelToken:
    """A cancellation signal, optionally carrying a deadline.

    Operations poll :attr:`cancelled` at entry boundaries and raise
    :class:`~skillsync.exception.CancelledError` themselves.
    """

    def __init__(self, *, timeout: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

