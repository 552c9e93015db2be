"""Repository database backed by pacman's repo-add and repo-remove.

Each operation runs one external command; success is judged by its exit
status only.
"""

import logging
import subprocess
from pathlib import Path

from kernrepo.core.errors import RepositoryError
from kernrepo.repository.base import RepositoryDatabase
from kernrepo.utils.shell import CommandResult, command_exists, run_command

logger = logging.getLogger(__name__)


class RepoToolsDatabase(RepositoryDatabase):
    """Database maintained with repo-add / repo-remove.

    Attributes:
        path: Location of the database file.
    """

    # Timeout for a single repo tool invocation (5 minutes)
    _REPO_TIMEOUT: float = 300.0

    def is_available(self) -> bool:
        """Check if both repo tools are installed."""
        return command_exists("repo-add") and command_exists("repo-remove")

    def add(self, package_file: Path) -> None:
        """Register a package file with repo-add.

        Args:
            package_file: Path of the package file to register.

        Raises:
            RepositoryError: If repo-add fails or cannot be run.
        """
        self._run("repo-add", str(package_file))

    def remove(self, package_name: str) -> None:
        """Unregister a package with repo-remove.

        Args:
            package_name: Name of the package (without version).

        Raises:
            RepositoryError: If repo-remove fails or cannot be run.
        """
        self._run("repo-remove", package_name)

    def _run(self, tool: str, argument: str) -> CommandResult:
        args = [tool, str(self.path), argument]
        logger.info("Executing %s %s %s", tool, self.path, argument)

        try:
            result = run_command(args, timeout=self._REPO_TIMEOUT)
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            raise RepositoryError(f"{tool} could not run: {e}") from e

        if not result.success:
            error_msg = result.stderr.strip() or f"{tool} exited with status {result.returncode}"
            raise RepositoryError(f"{tool} {argument} failed: {error_msg}")

        return result
