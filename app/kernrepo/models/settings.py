"""Settings model for kernrepo.

This module defines the Pydantic model representing config.toml, which
describes where the local repository lives, where packages come from and
how version ambiguity is resolved.
"""

from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kernrepo.models.token import ArtifactLayout

DEFAULT_CATALOG_URL = "https://geo.mirror.pkgbuild.com/core/os/x86_64/core.db"
DEFAULT_ARCHIVE_URL = "https://archive.archlinux.org/packages"


class Settings(BaseModel):
    """Configuration for the kernel repository synchronizer.

    Attributes:
        repo_dir: Directory holding the package files and the database.
        database_name: File name of the repository database inside repo_dir.
        catalog_url: URL of the compressed remote repository database.
        archive_url: Base URL of the package archive.
        arch: Architecture of the mirrored packages.
        package_extension: Package file extension.
        subpackages: Sub-package suffixes mirrored for every family.
        signatures: Download a detached signature next to every package.
        family_prefix: Prefix of the lines in the kernels file naming families.
        prefer_newest: Resolve ambiguous versions to the newest candidate.
        prefer_current: Keep the currently mirrored version while it is still listed.
        check_interval_hours: Minimum age of the last check before a new one.
        max_attempts: Download attempts per file before giving up.
        prompt_timeout: Seconds to wait for an interactive version choice.
    """

    model_config = ConfigDict(extra="forbid")

    repo_dir: Annotated[
        Path,
        Field(description="Local repository directory"),
    ] = Path("/srv/kernrepo")
    database_name: Annotated[
        str,
        Field(min_length=1, description="Repository database file name"),
    ] = "kernels.db.tar.gz"
    catalog_url: Annotated[
        str,
        Field(description="Remote repository database URL"),
    ] = DEFAULT_CATALOG_URL
    archive_url: Annotated[
        str,
        Field(description="Package archive base URL"),
    ] = DEFAULT_ARCHIVE_URL
    arch: Annotated[str, Field(min_length=1, description="Package architecture")] = "x86_64"
    package_extension: Annotated[
        str,
        Field(description="Package file extension"),
    ] = ".pkg.tar.zst"
    subpackages: Annotated[
        list[str],
        Field(description="Sub-package suffixes ('' is the base package)"),
    ] = ["", "-headers"]
    signatures: Annotated[bool, Field(description="Download detached signatures")] = True
    family_prefix: Annotated[
        str,
        Field(min_length=1, description="Prefix of tracked family lines"),
    ] = "linux"
    prefer_newest: Annotated[
        bool,
        Field(description="Pick the newest candidate on ambiguity"),
    ] = False
    prefer_current: Annotated[
        bool,
        Field(description="Keep the current version while still available"),
    ] = True
    check_interval_hours: Annotated[
        float,
        Field(ge=0, description="Minimum hours between remote checks"),
    ] = 1.0
    max_attempts: Annotated[
        int,
        Field(ge=1, le=100, description="Download attempts per file"),
    ] = 16
    prompt_timeout: Annotated[
        float,
        Field(gt=0, le=600, description="Interactive prompt timeout in seconds"),
    ] = 30.0

    @field_validator("archive_url", "catalog_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate that URLs use HTTP(S) and strip trailing slashes."""
        url = v.strip()
        if not url.startswith(("http://", "https://")):
            msg = f"URL must start with http:// or https://, got {url!r}"
            raise ValueError(msg)
        return url.rstrip("/")

    @field_validator("subpackages")
    @classmethod
    def validate_subpackages(cls, v: list[str]) -> list[str]:
        """Validate that the base package is mirrored exactly once."""
        if v.count("") != 1:
            msg = "subpackages must contain the base package ('') exactly once"
            raise ValueError(msg)
        if len(set(v)) != len(v):
            msg = f"subpackages contains duplicates: {v}"
            raise ValueError(msg)
        return v

    @property
    def database_path(self) -> Path:
        """Full path of the repository database."""
        return self.repo_dir / self.database_name

    @property
    def layout(self) -> ArtifactLayout:
        """Artifact naming convention derived from these settings."""
        return ArtifactLayout(
            arch=self.arch,
            extension=self.package_extension,
            subpackages=tuple(self.subpackages),
            signatures=self.signatures,
        )
