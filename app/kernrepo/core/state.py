"""Current-packages record.

This module provides the StateStore class for persisting the set of kernel
versions that are currently mirrored, one raw token per line.

The record's modification time doubles as the "last successful check"
timestamp, so it is refreshed even when the content does not change.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Iterable
from datetime import timedelta
from pathlib import Path
from tempfile import NamedTemporaryFile

from kernrepo.core.paths import get_current_state_path
from kernrepo.models.token import VersionToken, parse_tokens_lenient

logger = logging.getLogger(__name__)

# Family -> the single version mirrored for it
ResolvedSet = dict[str, VersionToken]


def _render(tokens: Iterable[VersionToken]) -> str:
    by_raw = {token.raw: token for token in tokens}
    ordered = sorted(by_raw.values(), key=lambda t: (t, t.raw))
    return "".join(f"{token.raw}\n" for token in ordered)


class StateStore:
    """Reads and writes the current-packages record.

    Storage location: ~/.local/state/kernrepo/current

    Attributes:
        path: Location of the record.
    """

    def __init__(self, path: Path | None = None) -> None:
        """Initialize StateStore.

        Args:
            path: Optional override for the record location.
        """
        self.path = path if path is not None else get_current_state_path()

    def exists(self) -> bool:
        """Check if a record has been written."""
        return self.path.exists()

    def load(self) -> ResolvedSet:
        """Read the record.

        Malformed lines are dropped, undecodable bytes included. Should a
        family appear more than once, the newest version wins.

        Returns:
            Mapping of family to its current token; empty if there is no record.
        """
        try:
            text = self.path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("Cannot read state record %s: %s", self.path, e)
            return {}

        current: ResolvedSet = {}
        for token in parse_tokens_lenient(text):
            previous = current.get(token.family)
            if previous is not None:
                logger.warning(
                    "State record lists %s twice (%s, %s); keeping the newest",
                    token.family,
                    previous.raw,
                    token.raw,
                )
                token = max(previous, token)
            current[token.family] = token
        return current

    def age_since_last_check(self) -> timedelta:
        """Time since the record was last written or touched.

        Returns:
            Age of the record; timedelta.max if there is none.
        """
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return timedelta.max
        return timedelta(seconds=max(0.0, time.time() - mtime))

    def touch(self) -> None:
        """Refresh the record's timestamp without changing its content."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch()

    def save(self, tokens: Iterable[VersionToken]) -> bool:
        """Atomically replace the record with the given tokens.

        Tokens are deduplicated and sorted. If the rendered content equals the
        existing record, only its timestamp is refreshed.

        Args:
            tokens: Tokens now authoritative for the repository.

        Returns:
            True if the content changed, False if only the timestamp moved.

        Raises:
            OSError: If the record cannot be written.
        """
        content = _render(tokens)

        try:
            unchanged = self.path.read_text(encoding="utf-8", errors="replace") == content
        except FileNotFoundError:
            unchanged = False

        if unchanged:
            self.touch()
            return False

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(str(tmp_path), str(self.path))
        except OSError:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise

        logger.debug("Wrote state record %s", self.path)
        return True
