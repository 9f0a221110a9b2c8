"""Content lookup: remote API first, local custom content as fallback.

resolve(name, category, endpoint):
  1. GET <endpoint>/<slugify(name)> from the remote fetcher. Any success wins.
  2. On any remote failure, probe local files derived from the query slug:
       <slug>.json, <slug_with_underscores>.json, <slugwithouthyphens>.json,
       custom-<slug>.json, my-<slug>.json, homebrew-<slug>.json
     The first file that loads and whose own name matches the query under
     name_key() is returned.
  3. Otherwise None.

A remote error and a remote "not found" look the same to the caller.
"""

from __future__ import annotations

import logging
from typing import Any

from dnd_companion.discovery import IndexLoader
from dnd_companion.fetcher import DocumentFetcher, FetchError
from dnd_companion.models import ContentCategory, ContentRecord, LookupResult
from dnd_companion.naming import filename_variants, prefixed_variants, same_key, same_slug, slugify

logger = logging.getLogger(__name__)


def local_candidates(name: str) -> list[str]:
    """Filenames probed for a query name, in probe order."""
    slug = slugify(name)
    return list(dict.fromkeys(filename_variants(slug) + prefixed_variants(slug)))


class ContentResolver:
    """Resolves display names to content records.

    Args:
        remote: Fetcher rooted at the remote API, e.g. "https://www.dnd5eapi.co/api".
        local:  Fetcher rooted at the custom data tree.
        log:    Diagnostics sink. Defaults to this module's logger.
    """

    def __init__(
        self,
        remote: DocumentFetcher,
        local: DocumentFetcher,
        log: logging.Logger | None = None,
    ) -> None:
        self._remote = remote
        self._local = local
        self._log = log or logger
        self._index = IndexLoader(local, log=self._log)

    async def resolve(
        self, name: str, category: ContentCategory, endpoint: str,
    ) -> LookupResult | None:
        category = ContentCategory(category)
        data = await self._fetch_remote(name, endpoint)
        if data is not None:
            return LookupResult(source="remote", data=data)

        for filename in local_candidates(name):
            try:
                data = await self._local.fetch_json(f"{category.value}/{filename}")
            except FetchError:
                continue
            if not isinstance(data, dict):
                continue
            declared = data.get("name")
            if isinstance(declared, str) and same_key(declared, name):
                self._log.debug("Resolved %r locally from %s/%s", name, category.value, filename)
                return LookupResult(source="local", data=data)

        self._log.debug("No %s match for %r", category.singular, name)
        return None

    async def lookup(
        self, name: str, category: ContentCategory, endpoint: str,
    ) -> LookupResult | None:
        """Remote first, then the discovered custom content index."""
        data = await self._fetch_remote(name, endpoint)
        if data is not None:
            return LookupResult(source="remote", data=data)
        record = await self.find_indexed(name, category)
        if record is not None:
            return LookupResult(source="local", data=record)
        return None

    async def find_indexed(self, name: str, category: ContentCategory) -> ContentRecord | None:
        """Find a custom record by comparing `name` against the category index."""
        category = ContentCategory(category)
        entries = await self._index.build_index(category)
        entry = next((e for e in entries if same_slug(e.name, name)), None)
        if entry is None:
            return None
        return await self.load_content(category, entry.filename)

    async def load_content(self, category: ContentCategory, filename: str) -> ContentRecord | None:
        """Load one custom content file. Returns None if it can't be loaded."""
        category = ContentCategory(category)
        try:
            data = await self._local.fetch_json(f"{category.value}/{filename}")
        except FetchError as e:
            self._log.error("Failed to load custom %s %s: %s", category.singular, filename, e)
            return None
        if not isinstance(data, dict):
            self._log.error("Custom %s %s is not a JSON object", category.singular, filename)
            return None
        return data

    async def _fetch_remote(self, name: str, endpoint: str) -> ContentRecord | None:
        path = f"{endpoint.rstrip('/')}/{slugify(name)}"
        try:
            data: Any = await self._remote.fetch_json(path)
        except FetchError as e:
            self._log.info("API lookup failed for %s, trying custom data... (%s)", name, e)
            return None
        if not isinstance(data, dict):
            self._log.info("API returned a non-object for %s, trying custom data...", name)
            return None
        return data
