"""Unit tests for StateStore.

Tests for the StateStore class that persists the mirrored versions.
"""

import logging
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path

import pytest
from kernrepo.core.paths import get_current_state_path
from kernrepo.core.state import StateStore
from kernrepo.models.token import VersionToken, parse_token


@pytest.fixture
def store(tmp_path: Path) -> StateStore:
    """Create a StateStore in a temporary directory."""
    return StateStore(tmp_path / "state" / "current")


class TestStateStoreInit:
    """Tests for StateStore initialization."""

    def test_default_path(self) -> None:
        """StateStore uses the XDG record path when none is given."""
        assert StateStore().path == get_current_state_path()

    def test_custom_path(self, tmp_path: Path) -> None:
        """StateStore uses the given path."""
        assert StateStore(tmp_path / "x").path == tmp_path / "x"


class TestLoad:
    """Tests for StateStore.load."""

    def test_missing_record(self, store: StateStore) -> None:
        """A missing record loads as empty."""
        assert not store.exists()
        assert store.load() == {}

    def test_loads_tokens(self, store: StateStore) -> None:
        """Each line becomes one family entry."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text("linux-6.6.1.arch1-1\nlinux-lts-6.1.60-1\n")

        current = store.load()

        assert set(current) == {"linux", "linux-lts"}
        assert current["linux-lts"].raw == "linux-lts-6.1.60-1"

    def test_duplicate_family_keeps_newest(
        self, store: StateStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A family listed twice resolves to its newest version."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text("linux-6.6.10-1\nlinux-6.6.9-1\n")

        with caplog.at_level(logging.WARNING):
            current = store.load()

        assert current["linux"].version == "6.6.10-1"
        assert "twice" in caplog.text

    def test_malformed_lines_dropped(self, store: StateStore) -> None:
        """Unparseable lines are ignored."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text("garbage\nzfs-2.2.0\n\n")

        assert store.load() == {"zfs": VersionToken("zfs", "2.2.0")}

    def test_undecodable_bytes_dropped(self, store: StateStore) -> None:
        """Invalid UTF-8 only loses the affected entries."""
        store.path.parent.mkdir(parents=True)
        store.path.write_bytes(b"linux-6.6.1-1\n\xff\xfe garbage\n")

        assert store.load() == {"linux": VersionToken("linux", "6.6.1-1")}

    def test_save_over_undecodable_record(self, store: StateStore) -> None:
        """A corrupt record is replaced by the next save."""
        store.path.parent.mkdir(parents=True)
        store.path.write_bytes(b"\xff\xfe\n")

        assert store.save([parse_token("zfs-2.2.0")])
        assert store.path.read_text() == "zfs-2.2.0\n"


class TestSave:
    """Tests for StateStore.save."""

    def test_writes_sorted_unique_lines(self, store: StateStore) -> None:
        """Tokens are written one per line, sorted, without duplicates."""
        tokens = [
            parse_token("linux-lts-6.1.60-1"),
            parse_token("linux-6.6.1-1"),
            parse_token("linux-lts-6.1.60-1"),
        ]

        assert store.save(tokens) is True

        assert store.path.read_text() == "linux-6.6.1-1\nlinux-lts-6.1.60-1\n"

    def test_empty_set(self, store: StateStore) -> None:
        """Saving nothing writes an empty record."""
        assert store.save([]) is True
        assert store.path.read_text() == ""
        assert store.exists()

    def test_round_trip(self, store: StateStore) -> None:
        """What is saved loads back."""
        store.save([parse_token("zfs-2.2.0"), parse_token("linux-6.6.1-1-x86_64")])

        current = store.load()

        assert current["zfs"] == VersionToken("zfs", "2.2.0")
        assert current["linux"].raw == "linux-6.6.1-1-x86_64"

    def test_unchanged_content_only_touches(
        self,
        store: StateStore,
        set_mtime: Callable[[Path, float], None],
    ) -> None:
        """Saving identical content refreshes the timestamp and reports no change."""
        tokens = [parse_token("linux-6.6.1-1")]
        store.save(tokens)
        set_mtime(store.path, 7200)
        assert store.age_since_last_check() > timedelta(hours=1)

        assert store.save(tokens) is False

        assert store.age_since_last_check() < timedelta(minutes=1)
        assert store.path.read_text() == "linux-6.6.1-1\n"

    def test_no_temp_files_left(self, store: StateStore) -> None:
        """The atomic write leaves only the record."""
        store.save([parse_token("linux-6.6.1-1")])
        store.save([parse_token("linux-6.6.2-1")])

        assert [p.name for p in store.path.parent.iterdir()] == ["current"]


class TestHeartbeat:
    """Tests for the last-check timestamp."""

    def test_age_without_record(self, store: StateStore) -> None:
        """A missing record is infinitely old."""
        assert store.age_since_last_check() == timedelta.max

    def test_touch_creates_record(self, store: StateStore) -> None:
        """touch creates an empty record and its directory."""
        store.touch()

        assert store.exists()
        assert store.load() == {}
        assert store.age_since_last_check() < timedelta(minutes=1)

    def test_age_follows_mtime(
        self,
        store: StateStore,
        set_mtime: Callable[[Path, float], None],
    ) -> None:
        """The age is measured from the record's modification time."""
        store.touch()
        set_mtime(store.path, 600)

        age = store.age_since_last_check()

        assert timedelta(seconds=590) < age < timedelta(seconds=660)
