"""Execution of a sync plan against the local repository.

The TransactionRunner moves through the phases

    IDLE -> DELETING -> DOWNLOADING -> PUBLISHING -> PERSISTED

and ends in FAILED when an exception escapes any of them. The state record
is only rewritten in PERSISTED (or touched for an empty plan), so an
interrupted run leaves the previous record in place and the next run
recomputes the same work.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from kernrepo.core.cancel import CancelToken
from kernrepo.core.errors import FatalDownloadError, FetchError, RepositoryError, SyncCancelled
from kernrepo.core.planner import SyncPlan
from kernrepo.core.state import StateStore
from kernrepo.models.token import ArtifactLayout, VersionToken
from kernrepo.remote.fetcher import Fetcher
from kernrepo.repository.base import RepositoryDatabase

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 16
DEFAULT_BACKOFF = 2.0


class Phase(Enum):
    """Progress of a transaction."""

    IDLE = "idle"
    DELETING = "deleting"
    DOWNLOADING = "downloading"
    PUBLISHING = "publishing"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass(slots=True)
class TransactionResult:
    """Outcome of executing a plan.

    Attributes:
        phase: Last phase reached.
        noop: True if the plan was empty and only the heartbeat ran.
        deleted: Tokens whose files were removed.
        downloaded: Tokens fully downloaded and published.
        published: Package files registered in the database, in order.
        failed: Token whose download was rolled back, if any.
        error: The fatal download error, if any.
    """

    phase: Phase = Phase.IDLE
    noop: bool = False
    deleted: list[VersionToken] = field(default_factory=list)
    downloaded: list[VersionToken] = field(default_factory=list)
    published: list[Path] = field(default_factory=list)
    failed: VersionToken | None = None
    error: FatalDownloadError | None = None


class TransactionRunner:
    """Applies a SyncPlan to the repository directory and database.

    Attributes:
        repo_dir: Directory holding the package files.
        layout: Artifact naming convention.
        archive_url: Base URL of the package archive.
        max_attempts: Download attempts per file.
        backoff: Seconds multiplied by the attempt number between attempts.
        result: Outcome of the most recent execute() call.
    """

    def __init__(
        self,
        repo_dir: Path,
        layout: ArtifactLayout,
        fetcher: Fetcher,
        database: RepositoryDatabase,
        state: StateStore,
        archive_url: str,
        cancel: CancelToken | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff: float = DEFAULT_BACKOFF,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.repo_dir = repo_dir
        self.layout = layout
        self.archive_url = archive_url.rstrip("/")
        self.max_attempts = max_attempts
        self.backoff = backoff
        self.result = TransactionResult()
        self._fetcher = fetcher
        self._database = database
        self._state = state
        self._cancel = cancel or CancelToken()
        self._sleep = sleep

    def package_url(self, package_name: str, file_name: str) -> str:
        """Archive URL of one artifact file."""
        return f"{self.archive_url}/{package_name[0]}/{package_name}/{file_name}"

    def execute(self, plan: SyncPlan) -> TransactionResult:
        """Run the plan.

        Args:
            plan: Plan to apply.

        Returns:
            TransactionResult describing what was done.

        Raises:
            FatalDownloadError: After persisting, if a package group exhausted
                its attempts. Groups completed before it are published.
            RepositoryError: If registering a package failed.
            SyncCancelled: If cancellation was requested at a checkpoint.
        """
        self.result = result = TransactionResult()

        if plan.is_noop:
            self._state.touch()
            result.noop = True
            result.phase = Phase.PERSISTED
            logger.info("Nothing to do; refreshed state timestamp")
            return result

        try:
            result.phase = Phase.DELETING
            self._delete(plan.to_delete)

            result.phase = Phase.DOWNLOADING
            staged = self._download(plan.to_download)

            result.phase = Phase.PUBLISHING
            self._publish(staged)

            self._state.save([*plan.to_keep, *result.downloaded])
            result.phase = Phase.PERSISTED
        except BaseException:
            result.phase = Phase.FAILED
            raise

        if result.error is not None:
            raise result.error
        return result

    def _delete(self, tokens: Iterable[VersionToken]) -> None:
        for token in tokens:
            for files in token.artifact_names(self.layout).values():
                self._cancel.checkpoint(f"deleting {files.package_name}")
                try:
                    self._database.remove(files.package_name)
                except RepositoryError as e:
                    logger.warning("Could not unregister %s: %s", files.package_name, e)
                for file_name in files.files:
                    (self.repo_dir / file_name).unlink(missing_ok=True)
            logger.info("Deleted %s", token)
            self.result.deleted.append(token)

    def _download(self, tokens: Iterable[VersionToken]) -> list[tuple[VersionToken, list[Path]]]:
        """Download token groups until one fails for good.

        Returns:
            Completed groups with their publishable (non-signature) files.
        """
        staged: list[tuple[VersionToken, list[Path]]] = []

        for token in tokens:
            group_files: list[Path] = []
            try:
                for files in token.artifact_names(self.layout).values():
                    for file_name in files.files:
                        self._cancel.checkpoint(f"downloading {file_name}")
                        dest = self.repo_dir / file_name
                        group_files.append(dest)
                        self._fetch_with_retry(self.package_url(files.package_name, file_name), dest)
            except FetchError as e:
                self._discard(group_files)
                logger.error("Giving up on %s: %s", token, e)
                self.result.failed = token
                self.result.error = FatalDownloadError(token.raw, e)
                break
            except SyncCancelled:
                self._discard(group_files)
                raise

            logger.info("Downloaded %s", token)
            publishable = [p for p in group_files if not self.layout.is_signature(p.name)]
            staged.append((token, publishable))

        return staged

    def _fetch_with_retry(self, url: str, dest: Path) -> None:
        part = dest.with_name(f"{dest.name}.part")
        last_error: FetchError | None = None

        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                self._cancel.checkpoint(f"retrying {dest.name}")
            try:
                self._fetcher.download(url, part)
                try:
                    part.replace(dest)
                except OSError as e:
                    raise FetchError(f"Cannot move {part.name} into place: {e}") from e
                return
            except FetchError as e:
                last_error = e
                part.unlink(missing_ok=True)
                logger.warning(
                    "Download attempt %d/%d of %s failed: %s",
                    attempt,
                    self.max_attempts,
                    dest.name,
                    e,
                )
            if attempt < self.max_attempts:
                self._sleep(self.backoff * attempt)

        if last_error is None:
            raise FetchError(f"No download attempts allowed for {dest.name}")
        raise last_error

    def _discard(self, paths: Iterable[Path]) -> None:
        for path in paths:
            path.unlink(missing_ok=True)
            path.with_name(f"{path.name}.part").unlink(missing_ok=True)

    def _publish(self, staged: Iterable[tuple[VersionToken, list[Path]]]) -> None:
        for token, paths in staged:
            for path in paths:
                self._database.add(path)
                self.result.published.append(path)
            self.result.downloaded.append(token)
