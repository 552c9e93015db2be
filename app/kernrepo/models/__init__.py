"""Data models for kernrepo.

This module exports the core data structures used throughout the application.
"""

from kernrepo.models.settings import Settings
from kernrepo.models.token import (
    ArtifactFiles,
    ArtifactLayout,
    VersionToken,
    group_by_family,
    parse_token,
    parse_tokens,
    parse_tokens_lenient,
    vercmp,
)

__all__ = [
    "ArtifactFiles",
    "ArtifactLayout",
    "Settings",
    "VersionToken",
    "group_by_family",
    "parse_token",
    "parse_tokens",
    "parse_tokens_lenient",
    "vercmp",
]
