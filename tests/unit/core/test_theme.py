"""Unit tests for theme module.

Tests for theme loading, validation, and Rich theme generation.
"""

# pyright: reportPrivateUsage=false

import logging
from importlib import resources
from pathlib import Path

import pytest
from kernrepo.core.paths import get_config_dir
from kernrepo.core.theme import (
    ThemeColors,
    _read_colors,
    get_theme,
    get_user_theme_path,
    load_theme,
)
from pydantic import ValidationError
from rich.theme import Theme


def write_user_theme(content: str) -> None:
    path = get_user_theme_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_short_hex_accepted(self) -> None:
        """#RGB colors are valid."""
        assert ThemeColors(muted="#abc").muted == "#abc"

    @pytest.mark.parametrize("color", ["ffffff", "#gggggg", "#abcd", "green"])
    def test_invalid_colors_rejected(self, color: str) -> None:
        """Only #RGB and #RRGGBB hex codes are accepted."""
        with pytest.raises(ValidationError):
            ThemeColors(kept=color)

    def test_unknown_color_rejected(self) -> None:
        """Extra color names are forbidden."""
        with pytest.raises(ValidationError):
            ThemeColors.model_validate({"sparkle": "#ffffff"})

    def test_styles_used_by_the_cli(self) -> None:
        """Every style referenced by the CLI is defined."""
        styles = ThemeColors().styles()
        for name in ("added", "removed", "kept", "warning", "error", "info", "bold_header"):
            assert name in styles
        assert styles["bold_header"] == f"bold {ThemeColors().header}"


class TestLoadTheme:
    """Tests for loading bundled and user themes."""

    def test_user_theme_path(self) -> None:
        """The user theme lives in the config directory."""
        assert get_user_theme_path() == get_config_dir() / "theme.toml"

    def test_bundled_theme_matches_defaults(self) -> None:
        """The bundled theme file defines every color with its default."""
        bundled = _read_colors(resources.files("kernrepo.data").joinpath("theme.toml"))
        assert bundled == ThemeColors().model_dump()

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file contributes no colors."""
        assert _read_colors(tmp_path / "absent.toml") == {}

    def test_user_override_merges(self) -> None:
        """User colors override single bundled colors."""
        write_user_theme('[colors]\nadded = "#00ff00"\n')

        colors = load_theme()

        assert colors.added == "#00ff00"
        assert colors.removed == ThemeColors().removed

    def test_invalid_user_theme_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        """An invalid user color falls back to the defaults."""
        write_user_theme('[colors]\nadded = "green"\n')

        with caplog.at_level(logging.WARNING):
            assert load_theme() == ThemeColors()
        assert "using defaults" in caplog.text

    def test_unparsable_user_theme_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        """A broken TOML file is logged and ignored."""
        write_user_theme("[colors\n")

        with caplog.at_level(logging.WARNING):
            assert load_theme() == ThemeColors()
        assert "Ignoring theme file" in caplog.text


class TestGetTheme:
    """Tests for the cached Rich theme."""

    def test_cached(self) -> None:
        """The theme is built once."""
        theme = get_theme()
        assert isinstance(theme, Theme)
        assert get_theme() is theme
