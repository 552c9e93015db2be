"""HTTP fetching of catalogs and package files.

The synchronization engine only depends on the Fetcher interface; the
HttpFetcher implementation streams with httpx and reports progress through
a Rich progress display when one is attached.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

import httpx
from rich.progress import Progress

from kernrepo import __version__
from kernrepo.core.errors import FetchError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class Fetcher(ABC):
    """Performs single HTTP GET attempts.

    Every method makes exactly one attempt and raises FetchError on any
    network or I/O failure; retrying is the caller's concern.
    """

    @abstractmethod
    def fetch(self, url: str) -> bytes:
        """Fetch a resource into memory.

        Args:
            url: Resource URL.

        Returns:
            Response body.

        Raises:
            FetchError: If the request fails.
        """

    @abstractmethod
    def download(self, url: str, dest: Path) -> None:
        """Stream a resource into a file, overwriting it.

        Args:
            url: Resource URL.
            dest: Target file path.

        Raises:
            FetchError: If the request or the write fails.
        """


class HttpFetcher(Fetcher):
    """Fetcher backed by an httpx client.

    Attributes:
        timeout: Per-request timeout in seconds.
        progress: Optional Rich progress display for downloads.
    """

    def __init__(
        self,
        timeout: float = 60.0,
        progress: Progress | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.timeout = timeout
        self.progress = progress
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=timeout,
            headers={"User-Agent": f"kernrepo/{__version__}"},
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> HttpFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch(self, url: str) -> bytes:
        """Fetch a resource into memory."""
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise FetchError(f"GET {url} failed: {e}") from e
        return response.content

    def download(self, url: str, dest: Path) -> None:
        """Stream a resource into a file, overwriting it."""
        logger.debug("GET %s -> %s", url, dest)
        task_id = None
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                total = int(response.headers.get("content-length", 0)) or None
                if self.progress is not None:
                    # Only render while a transfer runs so prompts stay readable
                    self.progress.start()
                    task_id = self.progress.add_task(dest.name, total=total)
                with dest.open("wb") as f:
                    for chunk in response.iter_bytes(_CHUNK_SIZE):
                        f.write(chunk)
                        if task_id is not None:
                            self.progress.advance(task_id, len(chunk))  # type: ignore[union-attr]
        except httpx.HTTPError as e:
            raise FetchError(f"GET {url} failed: {e}") from e
        except OSError as e:
            raise FetchError(f"Writing {dest} failed: {e}") from e
        finally:
            if task_id is not None:
                self.progress.remove_task(task_id)  # type: ignore[union-attr]
                self.progress.stop()  # type: ignore[union-attr]
