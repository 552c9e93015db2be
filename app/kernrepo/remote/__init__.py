"""Remote archive access: HTTP fetching and catalog listing."""

from kernrepo.remote.catalog import fetch_catalog, list_entries
from kernrepo.remote.fetcher import Fetcher, HttpFetcher

__all__ = ["Fetcher", "HttpFetcher", "fetch_catalog", "list_entries"]
