"""Repository database implementations.

This module provides the abstract RepositoryDatabase interface and the
implementation backed by pacman's repo tools.
"""

from kernrepo.repository.base import RepositoryDatabase
from kernrepo.repository.repo_tools import RepoToolsDatabase

__all__ = ["RepositoryDatabase", "RepoToolsDatabase"]
