"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import io
import logging
import os
import tarfile
import time
from collections import Counter
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from kernrepo.core.errors import FetchError
from kernrepo.models.settings import Settings
from kernrepo.models.token import parse_token
from kernrepo.remote.fetcher import Fetcher
from kernrepo.repository.base import RepositoryDatabase
from rich.logging import RichHandler


class FakeFetcher(Fetcher):
    """In-memory fetcher recording every request.

    Attributes:
        catalog: Bytes returned by fetch().
        fail: Predicate (url, attempt number) deciding whether a download fails.
        attempts: Download attempts per URL.
        downloads: Every download URL in call order.
    """

    def __init__(
        self,
        catalog: bytes = b"",
        fail: Callable[[str, int], bool] | None = None,
    ) -> None:
        self.catalog = catalog
        self.fail = fail
        self.fetched: list[str] = []
        self.downloads: list[str] = []
        self.attempts: Counter[str] = Counter()

    def fetch(self, url: str) -> bytes:
        self.fetched.append(url)
        return self.catalog

    def download(self, url: str, dest: Path) -> None:
        self.downloads.append(url)
        self.attempts[url] += 1
        if self.fail is not None and self.fail(url, self.attempts[url]):
            # Leave a partial file behind like an interrupted transfer would
            dest.write_bytes(b"partial")
            raise FetchError(f"GET {url} failed: connection reset")
        dest.write_bytes(f"content of {url}".encode())


class FakeDatabase(RepositoryDatabase):
    """Repository database keeping its entries in memory.

    Attributes:
        entries: Registered package name -> version.
        operations: ("add" | "remove", argument) in call order.
    """

    def __init__(self, path: Path, extension: str = ".pkg.tar.zst") -> None:
        super().__init__(path)
        self.extension = extension
        self.entries: dict[str, str] = {}
        self.operations: list[tuple[str, str]] = []

    def is_available(self) -> bool:
        return True

    def add(self, package_file: Path) -> None:
        self.operations.append(("add", package_file.name))
        token = parse_token(package_file.name.removesuffix(self.extension))
        self.entries[token.family] = token.version

    def remove(self, package_name: str) -> None:
        self.operations.append(("remove", package_name))
        self.entries.pop(package_name, None)


def build_catalog(entries: list[str]) -> bytes:
    """Build a gzip-compressed pacman-style database listing the entries."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for entry in entries:
            directory = tarfile.TarInfo(entry)
            directory.type = tarfile.DIRTYPE
            archive.addfile(directory)
            desc = f"%NAME%\n{entry}\n".encode()
            info = tarfile.TarInfo(f"{entry}/desc")
            info.size = len(desc)
            archive.addfile(info, io.BytesIO(desc))
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point XDG config and state directories into the test's tmp_path."""
    xdg_root = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg_root / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(xdg_root / "state"))
    yield xdg_root


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    """Empty local repository directory."""
    path = tmp_path / "repo"
    path.mkdir()
    return path


@pytest.fixture
def settings(repo_dir: Path) -> Settings:
    """Settings pointing at the temporary repository directory."""
    return Settings(repo_dir=repo_dir, archive_url="https://archive.test/packages")


@pytest.fixture
def fake_database(repo_dir: Path) -> FakeDatabase:
    """In-memory repository database."""
    return FakeDatabase(repo_dir / "kernels.db.tar.gz")


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    """Fetcher that always succeeds."""
    return FakeFetcher()


@pytest.fixture
def catalog_builder() -> Callable[[list[str]], bytes]:
    """Factory building compressed catalogs from entry names."""
    return build_catalog


@pytest.fixture
def set_mtime() -> Callable[[Path, float], None]:
    """Set a file's modification time to the given number of seconds ago."""

    def _set(path: Path, seconds_ago: float) -> None:
        stamp = time.time() - seconds_ago
        os.utime(path, (stamp, stamp))

    return _set


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """Drop the Rich handler and level that setup_logging installs."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    root.setLevel(level)
