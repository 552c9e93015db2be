"""Cooperative cancellation for a sync run.

Interruption signals only flip a flag; the engine polls it at defined
checkpoints (before every fetch, deletion and prompt) and unwinds through
normal exception handling, so the lock scope always releases.
"""

from __future__ import annotations

import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from types import FrameType

from kernrepo.core.errors import SyncCancelled

logger = logging.getLogger(__name__)


class CancelToken:
    """Flag set by an interruption and observed at checkpoints."""

    def __init__(self) -> None:
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        """Check if cancellation was requested."""
        return self._reason is not None

    def cancel(self, reason: str = "interrupted") -> None:
        """Request cancellation. Only the first reason is kept."""
        if self._reason is None:
            logger.debug("Cancellation requested: %s", reason)
            self._reason = reason

    def checkpoint(self, what: str) -> None:
        """Raise SyncCancelled if cancellation was requested.

        Args:
            what: Description of the step about to start, for the message.

        Raises:
            SyncCancelled: If cancellation was requested.
        """
        if self._reason is not None:
            raise SyncCancelled(f"Cancelled ({self._reason}) before {what}")


@contextmanager
def cancel_on_signals(
    token: CancelToken,
    signals: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM),
) -> Iterator[CancelToken]:
    """Install handlers that cancel the token, restoring the old ones on exit.

    Args:
        token: Token to cancel when a signal arrives.
        signals: Signals to watch.

    Yields:
        The same token.
    """

    def _handler(signum: int, _frame: FrameType | None) -> None:
        token.cancel(signal.Signals(signum).name)

    previous = {sig: signal.signal(sig, _handler) for sig in signals}
    try:
        yield token
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
