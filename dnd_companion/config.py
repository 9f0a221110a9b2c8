"""Settings and startup wiring.

Values come from the environment (a `.env` file in the working directory is
loaded first), falling back to defaults:

  DND_CONTENT_ROOT   custom data tree: directory path or http(s) URL
  DND_API_URL        remote content API base URL
  DND_PLATFORM       "desktop" (file store + local-storage backup) or "web"
  DND_APP_DATA_DIR   where desktop builds keep characters.json
  DND_HTTP_TIMEOUT   seconds
  DND_LOG_LEVEL      standard logging level name

The platform decides which stores the ledger gets; nothing below the wiring
helpers looks at it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel

from dnd_companion.discovery import IndexLoader
from dnd_companion.fetcher import DirectoryFetcher, DocumentFetcher, HttpFetcher
from dnd_companion.ledger import CharacterLedger
from dnd_companion.resolver import ContentResolver
from dnd_companion.stores import FileStore, LocalStorageStore, Store

DEFAULT_API_URL = "https://www.dnd5eapi.co/api"
LOCAL_STORAGE_FILE = "local-storage.json"

Platform = Literal["desktop", "web"]


class Settings(BaseModel):
    content_root: str = "data"
    api_url: str = DEFAULT_API_URL
    platform: Platform = "desktop"
    app_data_dir: Path = Path.home() / ".dnd-companion"
    http_timeout: float = 10.0
    log_level: str = "WARNING"


_ENV_FIELDS = {
    "DND_CONTENT_ROOT": "content_root",
    "DND_API_URL": "api_url",
    "DND_PLATFORM": "platform",
    "DND_APP_DATA_DIR": "app_data_dir",
    "DND_HTTP_TIMEOUT": "http_timeout",
    "DND_LOG_LEVEL": "log_level",
}


def get_settings(env_file: Path | None = None) -> Settings:
    """Read settings from the environment. Raises pydantic.ValidationError on bad values."""
    load_dotenv(env_file or Path.cwd() / ".env")
    values = {field: os.getenv(var) for var, field in _ENV_FIELDS.items()}
    return Settings(**{k: v for k, v in values.items() if v})


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

def make_fetcher(location: str, timeout: float = 10.0) -> DocumentFetcher:
    if location.startswith(("http://", "https://")):
        return HttpFetcher(location, timeout=timeout)
    return DirectoryFetcher(Path(location))


def open_stores(settings: Settings) -> tuple[Store, Store | None]:
    """(primary, backup) for the configured platform."""
    local_storage = LocalStorageStore(settings.app_data_dir / LOCAL_STORAGE_FILE)
    if settings.platform == "web":
        return local_storage, None
    return FileStore(settings.app_data_dir), local_storage


def open_ledger(settings: Settings) -> CharacterLedger:
    primary, backup = open_stores(settings)
    return CharacterLedger(primary, backup)


def open_index_loader(settings: Settings) -> IndexLoader:
    return IndexLoader(make_fetcher(settings.content_root, settings.http_timeout))


def open_resolver(settings: Settings) -> ContentResolver:
    return ContentResolver(
        remote=make_fetcher(settings.api_url, settings.http_timeout),
        local=make_fetcher(settings.content_root, settings.http_timeout),
    )
