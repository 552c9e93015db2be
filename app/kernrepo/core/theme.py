"""Console colors for the kernrepo CLI.

The bundled data/theme.toml holds the defaults; a theme.toml in the config
directory may override single colors.
"""

from __future__ import annotations

import logging
import tomllib
from functools import cache
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from rich.theme import Theme

from kernrepo.core.paths import get_config_dir

logger = logging.getLogger(__name__)

HexColor = Annotated[str, Field(pattern=r"^#(?:[0-9A-Fa-f]{3}){1,2}$")]


class ThemeColors(BaseModel):
    """Colors of the console styles, as #RGB or #RRGGBB hex codes."""

    model_config = ConfigDict(extra="forbid")

    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"
    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#0ec1c8"

    # Plan tables: downloaded, deleted and kept versions
    added: HexColor = "#c1ff62"
    removed: HexColor = "#f53263"
    kept: HexColor = "#0e8ac8"

    def styles(self) -> dict[str, str]:
        """Rich style definitions keyed by style name."""
        styles = self.model_dump()
        styles["error"] = f"bold {self.error}"
        styles["bold_header"] = f"bold {self.header}"
        return styles


def get_user_theme_path() -> Path:
    """Location of the user's color overrides (~/.config/kernrepo/theme.toml)."""
    return get_config_dir() / "theme.toml"


def _read_colors(path: Traversable) -> dict[str, object]:
    try:
        with path.open("rb") as f:
            colors = tomllib.load(f).get("colors", {})
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}
    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: 'colors' is not a table", path)
        return {}
    return colors


def load_theme() -> ThemeColors:
    """Load the bundled colors merged with the user's overrides.

    Returns:
        Validated colors; the defaults if the overrides are invalid.
    """
    bundled = resources.files("kernrepo.data").joinpath("theme.toml")
    colors = {**_read_colors(bundled), **_read_colors(get_user_theme_path())}
    try:
        return ThemeColors.model_validate(colors)
    except ValidationError as e:
        logger.warning("Invalid theme configuration, using defaults: %s", e)
        return ThemeColors()


@cache
def get_theme() -> Theme:
    """Rich theme shared by the consoles, loaded once."""
    return Theme(load_theme().styles())
