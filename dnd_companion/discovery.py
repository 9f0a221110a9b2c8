"""Custom content discovery: builds a per-category index without manual upkeep.

Scan flow for one category:
  1. Load the static index (index.json). Missing or malformed → empty.
  2. Load every file the index declares for the category → source "index".
  3. Generate candidate filenames from the category's common names
     (hyphenated / underscored / concatenated, plus custom-/my-/homebrew-
     prefixes on the first five names), de-duplicated in generation order.
  4. Probe every candidate not already loaded in step 2; keep files that
     declare a non-empty name → source "auto-detected".

Every fetch or parse failure is treated as "not there". The same name can
show up twice if two filenames serve it; entries are not collapsed by name.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from dnd_companion.fetcher import DocumentFetcher, FetchError
from dnd_companion.models import ContentCategory, ContentIndexEntry
from dnd_companion.naming import CUSTOM_PREFIXES, filename_variants

logger = logging.getLogger(__name__)

INDEX_PATH = "index.json"
PREFIXED_NAME_COUNT = 5


def _declared_name(data: Any) -> str | None:
    """The record's own `name` field, if it is a non-empty string."""
    if isinstance(data, dict):
        name = data.get("name")
        if isinstance(name, str) and name:
            return name
    return None


def candidate_filenames(category: ContentCategory) -> list[str]:
    """Speculative filenames to probe for a category, in generation order."""
    names = category.common_names
    candidates: list[str] = []
    for name in names:
        candidates.extend(filename_variants(name))
    for prefix in CUSTOM_PREFIXES:
        for name in names[:PREFIXED_NAME_COUNT]:
            candidates.append(f"{prefix}{name}.json")
    return list(dict.fromkeys(candidates))


class IndexLoader:
    """Discovers custom content files through a fetcher rooted at the data tree.

    Args:
        fetcher: Reads "index.json" and "<category>/<filename>" documents.
        log:     Diagnostics sink. Defaults to this module's logger.
    """

    def __init__(self, fetcher: DocumentFetcher, log: logging.Logger | None = None) -> None:
        self._fetcher = fetcher
        self._log = log or logger

    async def load_static_index(self) -> dict[str, list[dict[str, Any]]]:
        """Return the declared index, or an empty one if it can't be loaded."""
        try:
            data = await self._fetcher.fetch_json(INDEX_PATH)
        except FetchError as e:
            self._log.info("No static index found, using auto-detection only (%s)", e)
            return {c.value: [] for c in ContentCategory}
        if not isinstance(data, dict):
            self._log.warning("Static index is not a JSON object, ignored")
            return {c.value: [] for c in ContentCategory}
        return data

    async def build_index(self, category: ContentCategory) -> list[ContentIndexEntry]:
        """Scan one category. Never raises."""
        category = ContentCategory(category)
        static_index = await self.load_static_index()
        declared = static_index.get(category.value)
        if not isinstance(declared, list):
            declared = []

        entries = await self._load_declared(category, declared)
        entries.extend(await self._probe_candidates(category, entries))
        return entries

    async def build_all(self) -> dict[ContentCategory, list[ContentIndexEntry]]:
        """Scan all four categories concurrently."""
        self._log.info("Auto-detecting custom content files...")
        categories = list(ContentCategory)
        results = await asyncio.gather(*(self.build_index(c) for c in categories))
        found = dict(zip(categories, results))
        self._log.info(
            "Found %d custom content files: %s",
            sum(len(r) for r in results),
            ", ".join(f"{c.value}={len(found[c])}" for c in categories),
        )
        return found

    async def _load_declared(
        self, category: ContentCategory, declared: list[Any],
    ) -> list[ContentIndexEntry]:
        entries: list[ContentIndexEntry] = []
        for info in declared:
            if not isinstance(info, dict) or not isinstance(info.get("filename"), str):
                self._log.warning("Malformed %s index entry skipped: %r", category.value, info)
                continue
            filename = info["filename"]
            try:
                data = await self._fetcher.fetch_json(f"{category.value}/{filename}")
            except FetchError as e:
                self._log.warning("File %s listed in index but couldn't be loaded: %s", filename, e)
                continue

            name = _declared_name(data)
            entries.append(ContentIndexEntry(
                name=name or str(info.get("name") or ""),
                filename=filename,
                description=str(info.get("description") or f"Custom {category.singular}"),
                source="index",
            ))
        return entries

    async def _probe_candidates(
        self, category: ContentCategory, known: list[ContentIndexEntry],
    ) -> list[ContentIndexEntry]:
        known_filenames = {e.filename for e in known}
        found: list[ContentIndexEntry] = []
        for filename in candidate_filenames(category):
            if filename in known_filenames:
                continue
            try:
                data = await self._fetcher.fetch_json(f"{category.value}/{filename}")
            except FetchError:
                continue

            name = _declared_name(data)
            if name:
                self._log.debug("Auto-detected %s/%s (%s)", category.value, filename, name)
                found.append(ContentIndexEntry(
                    name=name,
                    filename=filename,
                    description=f"Auto-detected custom {category.singular}",
                    source="auto-detected",
                ))
        return found
