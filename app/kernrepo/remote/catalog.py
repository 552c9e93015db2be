"""Remote repository database listing.

A pacman sync database is a compressed tar archive with one directory per
package, named ``<pkgname>-<pkgver>-<pkgrel>``. The directory names are all
the synchronization engine needs, so they are flattened into a
whitespace-delimited listing for the token parser.
"""

import io
import logging
import tarfile

from kernrepo.core.errors import FetchError, TokenParseError
from kernrepo.remote.fetcher import Fetcher

logger = logging.getLogger(__name__)


def list_entries(data: bytes) -> str:
    """Extract package entry names from a compressed database.

    Args:
        data: Raw database bytes (gzip, bzip2, xz or uncompressed tar).

    Returns:
        Newline-separated, sorted, unique entry names.

    Raises:
        TokenParseError: If the data is not a readable tar archive.
    """
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as archive:
            names = {member.name.split("/", 1)[0] for member in archive.getmembers()}
    except (tarfile.TarError, EOFError, OSError) as e:
        raise TokenParseError(f"Unreadable repository database: {e}") from e

    names.discard("")
    logger.debug("Catalog lists %d entries", len(names))
    return "\n".join(sorted(names))


def fetch_catalog(fetcher: Fetcher, url: str) -> str:
    """Download a repository database and list its entries.

    Args:
        fetcher: Fetcher used for the single GET.
        url: Database URL.

    Returns:
        Whitespace-delimited entry listing.

    Raises:
        FetchError: If the database cannot be downloaded.
        TokenParseError: If the database cannot be read.
    """
    logger.info("Fetching catalog %s", url)
    try:
        data = fetcher.fetch(url)
    except FetchError:
        logger.error("Catalog download failed: %s", url)
        raise
    return list_entries(data)
