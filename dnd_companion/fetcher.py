"""Document fetchers: where content JSON comes from.

Discovery and lookup take a fetcher matching the protocol:

    async def fetch_json(self, path: str) -> Any: ...

`path` is relative to the fetcher's root, e.g. "index.json" or
"spells/fireball.json". Every failure is raised as a FetchError subclass so
callers only ever need to catch one type:

    ContentNotFound     404 / missing file
    ContentUnreachable  transport failure, timeout, non-404 HTTP error
    ContentParseError   body is not valid JSON

Two implementations are provided:

    HttpFetcher       httpx client against a base URL (remote API, or a
                      static file server hosting the custom data tree).
    DirectoryFetcher  reads from a local directory.

Tests use StubFetcher (defined in the test helpers) instead.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol: every fetcher implementation must match this signature
# ---------------------------------------------------------------------------

class DocumentFetcher(Protocol):
    async def fetch_json(self, path: str) -> Any: ...


# ---------------------------------------------------------------------------
# HttpFetcher: GETs JSON documents over HTTP
# ---------------------------------------------------------------------------

class HttpFetcher:
    """Async HTTP fetcher for JSON documents.

    Args:
        base_url: Root URL, e.g. "https://www.dnd5eapi.co/api" or
                  "http://localhost:1420/data".
        api_key:  Bearer token, or empty string if not required.
        timeout:  HTTP timeout in seconds. Defaults to 10.
    """

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def fetch_json(self, path: str) -> Any:
        url = self.url_for(path)
        logger.debug("fetch url=%s", url)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(url, headers=self._headers())
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise ContentNotFound(f"{url} not found") from e
            raise ContentUnreachable(f"{url} returned HTTP {status}") from e
        except httpx.TimeoutException as e:
            raise ContentUnreachable(f"{url} timed out after {self._timeout}s") from e
        except httpx.RequestError as e:
            raise ContentUnreachable(f"Cannot connect to {url}") from e

        try:
            return resp.json()
        except ValueError as e:
            raise ContentParseError(f"{url} is not valid JSON") from e


# ---------------------------------------------------------------------------
# DirectoryFetcher: reads JSON documents from a local directory
# ---------------------------------------------------------------------------

class DirectoryFetcher:
    """Reads `<root>/<path>` and parses it as JSON.

    File reads run in a worker thread so concurrent scans overlap.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    async def fetch_json(self, path: str) -> Any:
        file = self._root / path
        logger.debug("fetch file=%s", file)

        try:
            text = await asyncio.to_thread(file.read_text, encoding="utf-8")
        except FileNotFoundError as e:
            raise ContentNotFound(f"{file} not found") from e
        except UnicodeDecodeError as e:
            raise ContentParseError(f"{file} is not UTF-8 text") from e
        except OSError as e:
            raise ContentUnreachable(f"Cannot read {file}: {e}") from e

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ContentParseError(f"{file} is not valid JSON") from e


# ---------------------------------------------------------------------------
# Errors: raised by fetchers for all lookup failures
# ---------------------------------------------------------------------------

class FetchError(RuntimeError):
    """A document could not be fetched or decoded."""


class ContentNotFound(FetchError):
    """The document does not exist."""


class ContentUnreachable(FetchError):
    """The source could not be reached or answered with an error."""


class ContentParseError(FetchError):
    """The document exists but is not valid JSON."""
