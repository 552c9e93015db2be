"""Exception hierarchy for the synchronization engine.

Library code raises these; only the CLI layer converts them into
user-facing messages and exit codes.
"""


class SyncError(Exception):
    """Base exception for synchronization errors."""


class TokenParseError(SyncError):
    """Raised when a catalog entry does not decompose into family and version."""


class FetchError(SyncError):
    """Raised by a fetcher when a single download attempt fails."""


class FatalDownloadError(SyncError):
    """Raised when a package group exhausted its download attempts.

    Attributes:
        package: Raw token of the package group that failed.
        cause: The last transient error seen.
    """

    def __init__(self, package: str, cause: BaseException) -> None:
        self.package = package
        self.cause = cause
        super().__init__(f"Failed to download {package}: {cause}")


class LockBusyError(SyncError):
    """Raised when another run holds a fresh lock sentinel."""


class InteractiveTimeoutError(SyncError):
    """Raised when the version selection prompt got no answer in time."""


class RepositoryError(SyncError):
    """Raised when a repository database command fails."""


class SyncCancelled(SyncError):
    """Raised at a checkpoint after an interruption signal was received."""
