"""Unit tests for console formatting helpers."""

import logging

import pytest
from kernrepo.utils.formatting import format_age, setup_logging
from rich.logging import RichHandler


class TestFormatAge:
    """Tests for format_age."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (None, "never"),
            (0, "0s"),
            (42.9, "42s"),
            (60, "1m"),
            (59 * 60 + 59, "59m"),
            (3 * 3600 + 12 * 60, "3h 12m"),
            (47 * 3600, "47h 0m"),
            (3 * 86400, "3d"),
        ],
    )
    def test_format(self, seconds: float | None, expected: str) -> None:
        """Ages are rendered in the largest sensible unit."""
        assert format_age(seconds) == expected


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_default_level_is_warning(self) -> None:
        """Without verbose only warnings are shown."""
        setup_logging()

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert any(isinstance(h, RichHandler) for h in root.handlers)

    def test_verbose_enables_debug(self) -> None:
        """verbose switches to DEBUG."""
        setup_logging(verbose=True)

        assert logging.getLogger().level == logging.DEBUG
