"""Sync pipeline orchestration.

Runs one synchronization under the lock:
lock -> load state -> freshness check -> catalog -> resolve -> plan ->
execute -> persist -> unlock.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta

from kernrepo.core.errors import FatalDownloadError
from kernrepo.core.lock import LockGuard
from kernrepo.core.paths import ensure_repo_dir
from kernrepo.core.planner import SyncPlan, SyncPlanner
from kernrepo.core.resolver import VersionResolver
from kernrepo.core.session import SyncSession
from kernrepo.core.state import ResolvedSet, StateStore
from kernrepo.core.transaction import TransactionResult, TransactionRunner
from kernrepo.models.token import group_by_family, parse_tokens
from kernrepo.remote.catalog import fetch_catalog

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncReport:
    """What a sync run did.

    Attributes:
        current: Mirrored set at the start of the run.
        plan: Computed plan (None if the check was skipped).
        result: Transaction outcome (None if skipped or dry-run).
        skipped: True if the last check was recent enough to skip this one.
        age: Age of the last check at the start of the run.
        error: Fatal download error that ended the run, if any.
    """

    current: ResolvedSet
    plan: SyncPlan | None = None
    result: TransactionResult | None = None
    skipped: bool = False
    age: timedelta = timedelta.max
    error: FatalDownloadError | None = None


class SyncEngine:
    """Drives one synchronization for a session.

    Example:
        >>> engine = SyncEngine(session)
        >>> report = engine.run()
        >>> if report.plan and report.plan.is_noop:
        ...     print("Up to date")
    """

    def __init__(self, session: SyncSession, sleep: Callable[[float], None] = time.sleep) -> None:
        self.session = session
        self._sleep = sleep

    def run(
        self,
        *,
        force: bool = False,
        dry_run: bool = False,
        prefer_newest: bool | None = None,
        prefer_current: bool | None = None,
    ) -> SyncReport:
        """Run the pipeline under the lock.

        Args:
            force: Check the catalog even if the last check is recent.
            dry_run: Stop after planning.
            prefer_newest: Override the settings' newest-wins policy.
            prefer_current: Override the settings' keep-current policy.

        Returns:
            SyncReport of the run. A fatal download error is reported in
            ``error`` after the completed packages were published and persisted.

        Raises:
            LockBusyError: If another run holds the lock.
            FetchError: If the catalog cannot be downloaded.
            TokenParseError: If the catalog contains a malformed entry.
            InteractiveTimeoutError: If a version choice timed out.
            RepositoryError: If registering a package failed.
            SyncCancelled: If an interruption was observed at a checkpoint.
        """
        session = self.session
        settings = session.settings
        if prefer_newest is None:
            prefer_newest = settings.prefer_newest
        if prefer_current is None:
            prefer_current = settings.prefer_current

        with LockGuard(session.lock_path):
            state = StateStore(session.state_path)
            current = state.load()
            report = SyncReport(current=current, age=state.age_since_last_check())

            interval = timedelta(hours=settings.check_interval_hours)
            if not force and state.exists() and report.age < interval:
                logger.info("Last check %s ago, skipping", report.age)
                report.skipped = True
                return report

            session.cancel.checkpoint("fetching the catalog")
            listing = fetch_catalog(session.fetcher, settings.catalog_url)
            grouped = group_by_family(parse_tokens(listing, session.families))

            resolver = VersionResolver(
                session.prompter, timeout=settings.prompt_timeout, cancel=session.cancel
            )
            available = resolver.resolve(
                grouped,
                prefer_newest=prefer_newest,
                preferred=current if prefer_current else None,
            )

            report.plan = plan = SyncPlanner(session.families).plan(current, available)
            for family in plan.unavailable:
                logger.warning("%s is configured but not listed in the catalog", family)

            if dry_run:
                return report

            ensure_repo_dir(settings.repo_dir)
            runner = TransactionRunner(
                repo_dir=settings.repo_dir,
                layout=settings.layout,
                fetcher=session.fetcher,
                database=session.database,
                state=state,
                archive_url=settings.archive_url,
                cancel=session.cancel,
                max_attempts=settings.max_attempts,
                sleep=self._sleep,
            )
            try:
                report.result = runner.execute(plan)
            except FatalDownloadError as e:
                logger.error("%s", e)
                report.result = runner.result
                report.error = e

            return report
