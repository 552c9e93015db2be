"""XDG-compliant path management for kernrepo.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and state storage.

XDG defaults:
- Config: ~/.config/kernrepo/
- State: ~/.local/state/kernrepo/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "kernrepo"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/kernrepo/ (or XDG_CONFIG_HOME/kernrepo/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the current-packages record and the lock sentinel,
    which must persist between runs but are not configuration.

    Returns:
        Path to ~/.local/state/kernrepo/ (or XDG_STATE_HOME/kernrepo/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_settings_path() -> Path:
    """Get the settings file path.

    Returns:
        Path to ~/.config/kernrepo/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_kernels_path() -> Path:
    """Get the tracked kernels list path.

    Returns:
        Path to ~/.config/kernrepo/kernels.
    """
    return get_config_dir() / "kernels"


def get_current_state_path() -> Path:
    """Get the current-packages record path.

    Returns:
        Path to ~/.local/state/kernrepo/current.
    """
    return get_state_dir() / "current"


def get_lock_path() -> Path:
    """Get the sync lock sentinel path.

    Returns:
        Path to ~/.local/state/kernrepo/sync.lock.
    """
    return get_state_dir() / "sync.lock"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Returns:
        Path to the configuration directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Returns:
        Path to the state directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")


def ensure_repo_dir(path: Path) -> Path:
    """Create the local repository directory if it doesn't exist.

    Args:
        path: Repository directory holding packages and the database.

    Returns:
        The repository directory path.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(path, "repository")
