"""Signal handling utilities."""

import signal
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from types import FrameType
from typing import Any

from loguru import logger

from skillsync.cancel import CancelToken


def create_sigint_handler(token: CancelToken) -> Callable[[int, FrameType | None], None]:
    """Create a SIGINT handler that cancels ``token``.

    A second interrupt falls through to the default handler, so a stuck
    operation can still be killed.
    """

    def handler(signum: int, frame: FrameType | None) -> None:
        if token.cancelled:
            signal.default_int_handler(signum, frame)
            return
        logger.info("Interrupt received, cancelling at the next entry boundary")
        token.cancel()

    return handler


@contextmanager
def cancel_on_sigint(token: CancelToken) -> Iterator[CancelToken]:
    """Route SIGINT to ``token`` for the duration of the block.

    Outside the main thread signal handlers cannot be installed; the token is
    yielded unchanged.
    """
    if threading.current_thread() is not threading.main_thread():
        yield token
        return
    previous: Any = signal.signal(signal.SIGINT, create_sigint_handler(token))
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)
