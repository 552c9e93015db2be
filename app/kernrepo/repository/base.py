"""Abstract base class for repository databases.

This module defines the RepositoryDatabase interface the transaction runner
uses to register and unregister packages.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class RepositoryDatabase(ABC):
    """Capability to add packages to and remove them from a repository database.

    Implementations may shell out to pacman's repo tools or manipulate the
    database directly; the synchronization engine only relies on these
    operations raising RepositoryError when they fail.

    Attributes:
        path: Location of the database file.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the database handle.

        Args:
            path: Location of the database file.
        """
        self.path = path

    @abstractmethod
    def add(self, package_file: Path) -> None:
        """Register a package file, replacing any entry with the same name.

        Args:
            package_file: Path of the package file to register.

        Raises:
            RepositoryError: If the package could not be added.
        """

    @abstractmethod
    def remove(self, package_name: str) -> None:
        """Unregister a package by name.

        Args:
            package_name: Name of the package (without version).

        Raises:
            RepositoryError: If the package could not be removed.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the database can be modified on this system.

        Returns:
            True if add/remove can be used, False otherwise.
        """
