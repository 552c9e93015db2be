"""Configuration file I/O operations.

This module provides functions for loading and saving the settings file
in TOML format with validation using Pydantic models, and for reading the
line-oriented list of tracked kernel families.
"""

import logging
import os
import shutil
import tomllib
from importlib import resources
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w
from pydantic import ValidationError

from kernrepo.core.paths import get_kernels_path, get_settings_path
from kernrepo.models.settings import Settings

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the settings file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the settings content is invalid."""


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings from a TOML file.

    A missing file is not an error: defaults are returned.

    Args:
        path: Path to the settings file. If None, uses default settings path.

    Returns:
        Validated Settings object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
        ConfigError: If the file cannot be read.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        logger.debug("No settings file at %s, using defaults", settings_path)
        return Settings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read settings: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid settings content: {e}") from e


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Args:
        settings: The Settings object to save.
        path: Path to save the settings. If None, uses default settings path.

    Returns:
        Path where the settings were saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = settings.model_dump(mode="json")

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write settings: {e}") from e

    return settings_path


def get_bundled_kernels_path() -> Path:
    """Get the bundled sample kernels file path.

    Returns:
        Path to the bundled data/kernels.sample
    """
    return resources.files("kernrepo.data").joinpath("kernels.sample")  # type: ignore[return-value]


def seed_kernels_file(path: Path | None = None) -> Path:
    """Create the kernels file from the bundled sample if it is missing.

    Args:
        path: Path of the kernels file. If None, uses default kernels path.

    Returns:
        Path of the (possibly pre-existing) kernels file.

    Raises:
        ConfigError: If the sample cannot be copied.
    """
    kernels_path = path or get_kernels_path()
    if kernels_path.exists():
        return kernels_path

    try:
        kernels_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(Path(get_bundled_kernels_path()), kernels_path)
    except OSError as e:
        raise ConfigError(f"Failed to seed kernels file {kernels_path}: {e}") from e

    logger.info("Seeded kernels file %s from bundled sample", kernels_path)
    return kernels_path


def parse_families(text: str, prefix: str) -> list[str]:
    """Extract tracked families from the kernels file content.

    Only lines beginning with the family prefix count; the first word of
    such a line is the family name. Everything else (comments, blank lines,
    notes) is ignored.

    Args:
        text: Content of the kernels file.
        prefix: Family prefix (e.g., "linux").

    Returns:
        Sorted, deduplicated family names.
    """
    families: set[str] = set()
    for line in text.splitlines():
        if not line.startswith(prefix):
            continue
        families.add(line.split()[0])
    return sorted(families)


def load_families(prefix: str, path: Path | None = None) -> list[str]:
    """Load tracked families, seeding the kernels file first if needed.

    Args:
        prefix: Family prefix of tracked lines.
        path: Path of the kernels file. If None, uses default kernels path.

    Returns:
        Sorted, deduplicated family names.

    Raises:
        ConfigError: If the file cannot be seeded or read.
    """
    kernels_path = seed_kernels_file(path)
    try:
        text = kernels_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read kernels file {kernels_path}: {e}") from e
    return parse_families(text, prefix)


def require_settings(path: Path | None = None) -> Settings:
    """Load settings or exit with helpful error message.

    This is a convenience wrapper around load_settings() that handles
    error cases by printing user-friendly messages and exiting.

    Args:
        path: Optional custom settings path.

    Returns:
        Loaded and validated Settings.

    Raises:
        typer.Exit: If the settings cannot be loaded.
    """
    import typer

    from kernrepo.utils.formatting import print_error, print_info

    settings_path = path or get_settings_path()
    try:
        return load_settings(settings_path)
    except ConfigError as e:
        print_error(f"Failed to load settings: {e}")
        print_info(f"Fix {settings_path} or run 'kernrepo init --force' to reset it.")
        raise typer.Exit(code=1) from e


def require_families(settings: Settings, path: Path | None = None) -> list[str]:
    """Load tracked families or exit with helpful error message.

    Args:
        settings: Settings providing the family prefix.
        path: Optional custom kernels file path.

    Returns:
        Sorted family names (possibly empty).

    Raises:
        typer.Exit: If the kernels file cannot be seeded or read.
    """
    import typer

    from kernrepo.utils.formatting import print_error

    try:
        return load_families(settings.family_prefix, path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
