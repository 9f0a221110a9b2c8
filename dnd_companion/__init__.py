"""Custom content lookup and character persistence for a D&D character tool.

Content:
  IndexLoader      discovers custom backgrounds/classes/races/spells from a
                   static index.json plus speculative filename probing.
  ContentResolver  name → record, remote API first, local custom data second.

Characters:
  CharacterLedger  load/save the full character list, upsert by name,
                   portable import/export.

Wiring from environment settings lives in `config`.
"""

# Re-export the public surface so `import dnd_companion` is enough.

from .config import (  # noqa: F401
    Settings,
    configure_logging,
    get_settings,
    open_index_loader,
    open_ledger,
    open_resolver,
)

from .discovery import IndexLoader, candidate_filenames  # noqa: F401

from .fetcher import (  # noqa: F401
    ContentNotFound,
    ContentParseError,
    ContentUnreachable,
    DirectoryFetcher,
    FetchError,
    HttpFetcher,
)

from .ledger import (  # noqa: F401
    CharacterLedger,
    FormatError,
    export_portable,
    find_match,
    import_portable,
)

from .models import (  # noqa: F401
    ContentCategory,
    ContentIndexEntry,
    LookupResult,
    PortableExport,
)

from .naming import name_key, slugify  # noqa: F401

from .resolver import ContentResolver  # noqa: F401

from .stores import FileStore, LocalStorageStore, MemoryStore, StoreError  # noqa: F401
