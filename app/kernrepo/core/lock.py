"""Process exclusion through a lock sentinel file.

Only one sync may run at a time. The sentinel's existence is the lock and
its modification time tells its age; a sentinel older than the staleness
threshold belongs to a run that died without cleaning up and is reclaimed.
Reclaiming renames the sentinel aside and checks that it is still the one
found stale, so a fresh lock taken meanwhile is never deleted.
"""

from __future__ import annotations

import logging
import os
import time
from datetime import timedelta
from pathlib import Path
from types import TracebackType

from kernrepo.core.errors import LockBusyError

logger = logging.getLogger(__name__)

STALE_AFTER = timedelta(minutes=5)


class LockGuard:
    """Scoped ownership of the sync lock sentinel.

    Example:
        >>> with LockGuard(get_lock_path()):
        ...     run_sync()

    Attributes:
        path: Location of the sentinel file.
        stale_after: Age beyond which an existing sentinel is reclaimed.
    """

    def __init__(self, path: Path, stale_after: timedelta = STALE_AFTER) -> None:
        self.path = path
        self.stale_after = stale_after
        self._held = False

    @property
    def held(self) -> bool:
        """Check if this guard currently owns the sentinel."""
        return self._held

    def age(self) -> timedelta | None:
        """Age of the existing sentinel, or None if there is none."""
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return None
        return timedelta(seconds=max(0.0, time.time() - mtime))

    def acquire(self) -> None:
        """Take the lock, reclaiming a stale sentinel.

        Raises:
            LockBusyError: If a sentinel younger than the threshold exists.
            OSError: If the sentinel cannot be created.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        while True:
            try:
                fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
                break
            except FileExistsError:
                pass

            try:
                seen = self.path.stat()
            except FileNotFoundError:
                continue
            age = timedelta(seconds=max(0.0, time.time() - seen.st_mtime))
            if age <= self.stale_after:
                raise LockBusyError(
                    f"Another sync is running (lock {self.path} is {int(age.total_seconds())}s old)"
                )
            logger.warning(
                "Reclaiming stale lock %s (%ds old)", self.path, int(age.total_seconds())
            )
            self._reclaim(seen)

        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(f"{os.getpid()}\n")

        self._held = True
        logger.debug("Acquired lock %s", self.path)

    def _reclaim(self, seen: os.stat_result) -> None:
        """Move the stale sentinel out of the way, but only the one we saw.

        Raises:
            LockBusyError: If another run replaced the sentinel in the meantime.
        """
        aside = self.path.with_name(f"{self.path.name}.{os.getpid()}.stale")
        try:
            os.rename(self.path, aside)
        except FileNotFoundError:
            # Another run reclaimed it first
            return

        moved = aside.stat()
        if (moved.st_ino, moved.st_mtime_ns) == (seen.st_ino, seen.st_mtime_ns):
            aside.unlink()
            return

        # A fresh sentinel was taken by mistake; put it back
        try:
            os.link(aside, self.path)
        except FileExistsError:
            logger.warning("Lock %s was re-created while being reclaimed", self.path)
        aside.unlink()
        raise LockBusyError(f"Another sync is running (lock {self.path})")

    def release(self) -> None:
        """Delete the sentinel if this guard holds it. Safe to call twice."""
        if not self._held:
            return
        self._held = False
        self.path.unlink(missing_ok=True)
        logger.debug("Released lock %s", self.path)

    def __enter__(self) -> LockGuard:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
