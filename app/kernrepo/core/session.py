"""Per-run context for the synchronization engine.

A SyncSession bundles the settings, file locations and collaborators of one
run so that no component reaches for process-wide state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from kernrepo.core.cancel import CancelToken
from kernrepo.core.paths import get_current_state_path, get_lock_path
from kernrepo.core.resolver import Prompter
from kernrepo.models.settings import Settings
from kernrepo.remote.fetcher import Fetcher
from kernrepo.repository.base import RepositoryDatabase


@dataclass(slots=True)
class SyncSession:
    """Everything a sync run needs.

    Attributes:
        settings: Validated settings.
        families: Configured kernel families.
        fetcher: HTTP boundary.
        database: Repository database capability.
        prompter: Interactive channel for ambiguous versions, if any.
        state_path: Location of the current-packages record.
        lock_path: Location of the lock sentinel.
        cancel: Cancellation token observed at checkpoints.
    """

    settings: Settings
    families: list[str]
    fetcher: Fetcher
    database: RepositoryDatabase
    prompter: Prompter | None = None
    state_path: Path = field(default_factory=get_current_state_path)
    lock_path: Path = field(default_factory=get_lock_path)
    cancel: CancelToken = field(default_factory=CancelToken)
