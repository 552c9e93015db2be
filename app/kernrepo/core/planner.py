"""Sync planner for comparing mirrored versions with the catalog.

This module provides the SyncPlanner class that decides, per family, which
tokens to download, which to delete and which to keep.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from kernrepo.core.state import ResolvedSet
from kernrepo.models.token import VersionToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SyncPlan:
    """Instruction set for one sync run.

    Attributes:
        to_download: Tokens to fetch and publish.
        to_delete: Tokens whose files and database entries go away.
        to_keep: Tokens already mirrored and still wanted.
        unavailable: Configured families neither mirrored nor listed remotely.
    """

    to_download: tuple[VersionToken, ...] = ()
    to_delete: tuple[VersionToken, ...] = ()
    to_keep: tuple[VersionToken, ...] = ()
    unavailable: tuple[str, ...] = ()

    @property
    def is_noop(self) -> bool:
        """Check if the plan leaves the repository untouched."""
        return not (self.to_download or self.to_delete)

    @property
    def total_changes(self) -> int:
        """Number of tokens downloaded or deleted."""
        return len(self.to_download) + len(self.to_delete)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "noop": self.is_noop,
            "download": [t.raw for t in self.to_download],
            "delete": [t.raw for t in self.to_delete],
            "keep": [t.raw for t in self.to_keep],
            "unavailable": list(self.unavailable),
        }


class SyncPlanner:
    """Computes a SyncPlan from the current and available sets.

    Families that are no longer configured are pruned in a first pass that
    ignores the catalog, so dropping a kernel from the configuration always
    removes it even while the archive still lists it.

    Example:
        >>> planner = SyncPlanner(["linux", "linux-lts"])
        >>> plan = planner.plan(state.load(), available)
        >>> if plan.is_noop:
        ...     print("Repository is up to date")
    """

    def __init__(self, configured: Iterable[str]) -> None:
        """Initialize the planner.

        Args:
            configured: Families the repository should mirror.
        """
        self.configured = frozenset(configured)

    def plan(self, current: ResolvedSet, available: ResolvedSet) -> SyncPlan:
        """Diff current against available.

        Args:
            current: Mirrored token per family.
            available: Resolved remote token per family.

        Returns:
            SyncPlan covering every configured family.
        """
        to_delete: list[VersionToken] = [
            token for family, token in current.items() if family not in self.configured
        ]
        for token in to_delete:
            logger.info("Pruning %s: family no longer configured", token)

        to_download: list[VersionToken] = []
        to_keep: list[VersionToken] = []
        unavailable: list[str] = []

        for family in sorted(self.configured):
            mirrored = current.get(family)
            listed = available.get(family)

            if listed is None:
                if mirrored is None:
                    unavailable.append(family)
                else:
                    # Not listed remotely anymore; keep what we have
                    to_keep.append(mirrored)
                continue

            if mirrored is None:
                to_download.append(listed)
            elif mirrored == listed:
                to_keep.append(mirrored)
            else:
                to_download.append(listed)
                to_delete.append(mirrored)

        return SyncPlan(
            to_download=tuple(sorted(to_download)),
            to_delete=tuple(sorted(to_delete)),
            to_keep=tuple(sorted(to_keep)),
            unavailable=tuple(unavailable),
        )
