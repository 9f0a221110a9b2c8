"""Character ledger: the user's saved characters as one persisted list.

The whole list is read on every load and written on every save; there are
no partial writes. Two stores are involved:

  primary    where the list lives (app-data file on desktop, local
               storage on web).
  secondary  optional backup. Every successful primary write is mirrored
               here; a failed primary read or write falls back to it.

Upsert matching (first stage with any hit wins):
  1. exact name
  2. either name contains the other ("Garb" ↔ "Garb the Bold")
  3. same base after stripping a parenthetical ("Garb (Tamta)" ↔ "Garb")
The matched slot takes the incoming record but keeps its stored name.

upsert is read-modify-write without locking; a concurrent save between its
load and its write is lost.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from dnd_companion.models import CharacterRecord, PortableExport
from dnd_companion.stores import Store, StoreError

logger = logging.getLogger(__name__)

CHARACTERS_KEY = "characters.json"
BACKUP_KEY = "dnd-saved-characters"

DownloadTrigger = Callable[[bytes, str], None]
NameMatcher = Callable[[str, str], bool]


# ---------------------------------------------------------------------------
# Name matching stages
# ---------------------------------------------------------------------------

def strip_qualifier(name: str) -> str:
    """Drop everything from the first "(" on. "Garb (Tamta)" → "Garb"."""
    return name.split("(", 1)[0].strip()


def exact_match(stored: str, incoming: str) -> bool:
    return stored == incoming


def partial_match(stored: str, incoming: str) -> bool:
    return stored in incoming or incoming in stored


def base_name_match(stored: str, incoming: str) -> bool:
    return strip_qualifier(stored) == strip_qualifier(incoming)


NAME_MATCHERS: tuple[NameMatcher, ...] = (exact_match, partial_match, base_name_match)


def find_match(
    records: list[CharacterRecord],
    name: str,
    matchers: tuple[NameMatcher, ...] = NAME_MATCHERS,
) -> int | None:
    """Index of the record `name` refers to, or None.

    Matchers are tried in order; within a stage the first record wins.
    Records without a string name never match.
    """
    for matcher in matchers:
        for i, record in enumerate(records):
            stored = record.get("name") if isinstance(record, dict) else None
            if isinstance(stored, str) and matcher(stored, name):
                return i
    return None


# ---------------------------------------------------------------------------
# Portable export / import
# ---------------------------------------------------------------------------

def export_portable(records: list[CharacterRecord]) -> dict[str, Any]:
    """Wrap records with an export timestamp and format version."""
    return PortableExport(characters=list(records)).model_dump(by_alias=True)


def import_portable(document: Any) -> list[CharacterRecord]:
    """Accept a wrapped export or a bare list of characters.

    Raises FormatError if neither shape applies or an element is not an object.
    """
    characters = document
    if isinstance(document, dict) and "characters" in document:
        characters = document["characters"]
    if not isinstance(characters, list):
        raise FormatError("Invalid file format: expected array of characters")
    if not all(isinstance(c, dict) for c in characters):
        raise FormatError("Invalid file format: every character must be an object")
    return list(characters)


def default_export_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"dnd-characters-backup-{now.date().isoformat()}.json"


# ---------------------------------------------------------------------------
# CharacterLedger
# ---------------------------------------------------------------------------

class CharacterLedger:
    """Loads, saves and upserts the character list.

    Args:
        primary:       Store holding the ledger.
        secondary:     Backup store, or None.
        primary_key:   Key of the ledger in the primary store.
        secondary_key: Key of the ledger in the backup store.
        log:           Diagnostics sink. Defaults to this module's logger.
    """

    def __init__(
        self,
        primary: Store,
        secondary: Store | None = None,
        *,
        primary_key: str = CHARACTERS_KEY,
        secondary_key: str = BACKUP_KEY,
        log: logging.Logger | None = None,
    ) -> None:
        self._primary = primary
        self._secondary = secondary
        self._primary_key = primary_key
        self._secondary_key = secondary_key
        self._log = log or logger

    async def load_all(self) -> list[CharacterRecord]:
        """Read the full ledger. Never raises; falls back to the backup store."""
        try:
            raw = await self._primary.read(self._primary_key)
            if raw is None:
                self._log.info("Characters file does not exist yet")
                return []
            characters = _decode(raw)
        except (StoreError, FormatError) as e:
            self._log.error("Error loading characters: %s", e)
            if self._secondary is None:
                return []
            self._log.warning("Falling back to backup store...")
            return await self._load_backup(self._secondary)

        self._log.info("Loaded %d characters", len(characters))
        return characters

    async def save_all(self, records: list[CharacterRecord]) -> bool:
        """Write the full ledger to the primary store and mirror it to the backup.

        Returns True if at least the write that counted succeeded: the primary
        one, or the backup one when the primary failed.
        """
        data = json.dumps(records, indent=2).encode("utf-8")
        try:
            await self._primary.write(self._primary_key, data)
        except StoreError as e:
            self._log.error("Error saving characters: %s", e)
            if self._secondary is None:
                return False
            self._log.warning("Falling back to backup store...")
            return await self._save_backup(self._secondary, data, len(records))

        self._log.info("Saved %d characters", len(records))
        if self._secondary is not None:
            await self._save_backup(self._secondary, data, len(records))
        return True

    async def upsert(self, record: CharacterRecord) -> bool:
        """Insert or update one character, matched by name. Returns save_all's result."""
        name = record.get("name")
        if not isinstance(name, str) or not name:
            raise FormatError("Character record has no name")

        records = await self.load_all()
        index = find_match(records, name)
        if index is None:
            records.append(dict(record))
        else:
            updated = dict(record)
            updated["name"] = records[index]["name"]
            records[index] = updated
        return await self.save_all(records)

    def export_characters(
        self,
        records: list[CharacterRecord],
        download: DownloadTrigger,
        filename: str | None = None,
    ) -> str:
        """Hand an export document to the download trigger. Returns the filename used."""
        filename = filename or default_export_filename()
        data = json.dumps(export_portable(records), indent=2).encode("utf-8")
        download(data, filename)
        self._log.info("Exported %d characters to %s", len(records), filename)
        return filename

    def import_characters(self, text: str | bytes) -> list[CharacterRecord]:
        """Parse an exported file's contents. Raises FormatError."""
        try:
            document = json.loads(text)
        except ValueError as e:
            raise FormatError(f"Invalid file format: {e}") from e
        characters = import_portable(document)
        self._log.info("Imported %d characters from file", len(characters))
        return characters

    def storage_info(self) -> dict[str, Any]:
        """Which backend is active and, for files, where the ledger lives."""
        info: dict[str, Any] = {
            "platform": getattr(self._primary, "platform", type(self._primary).__name__),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        describe = getattr(self._primary, "describe", None)
        if describe is not None:
            try:
                info.update(describe(self._primary_key))
            except OSError as e:
                info["error"] = str(e)
        return info

    async def _load_backup(self, backup: Store) -> list[CharacterRecord]:
        try:
            raw = await backup.read(self._secondary_key)
            characters = _decode(raw) if raw is not None else []
        except (StoreError, FormatError) as e:
            self._log.error("Error loading from backup store: %s", e)
            return []
        self._log.info("Loaded %d characters from backup store", len(characters))
        return characters

    async def _save_backup(self, backup: Store, data: bytes, count: int) -> bool:
        try:
            await backup.write(self._secondary_key, data)
        except StoreError as e:
            self._log.error("Error saving to backup store: %s", e)
            return False
        self._log.debug("Saved %d characters to backup store", count)
        return True


def _decode(raw: bytes) -> list[CharacterRecord]:
    try:
        characters = json.loads(raw)
    except ValueError as e:
        raise FormatError(f"Stored characters are not valid JSON: {e}") from e
    if not isinstance(characters, list):
        raise FormatError("Stored characters are not a list")
    return characters


class FormatError(ValueError):
    """A character document does not have the expected shape."""
