"""Core domain models.

Content records and character records stay plain dicts (opaque JSON); only
the shapes this package produces itself are modelled here. Pydantic is used
for validation and serialisation at those boundaries.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ContentRecord = dict[str, Any]
CharacterRecord = dict[str, Any]

EXPORT_VERSION = "1.0"


class ContentCategory(str, Enum):
    """The four kinds of custom content the character tool knows about."""

    BACKGROUNDS = "backgrounds"
    CLASSES = "classes"
    RACES = "races"
    SPELLS = "spells"

    @property
    def singular(self) -> str:
        return _SINGULAR[self]

    @property
    def common_names(self) -> tuple[str, ...]:
        """Seed vocabulary used for speculative filename probing."""
        return _COMMON_NAMES[self]


_SINGULAR = {
    ContentCategory.BACKGROUNDS: "background",
    ContentCategory.CLASSES: "class",
    ContentCategory.RACES: "race",
    ContentCategory.SPELLS: "spell",
}

_COMMON_NAMES: dict[ContentCategory, tuple[str, ...]] = {
    ContentCategory.BACKGROUNDS: (
        "chef", "scholar", "merchant", "soldier", "noble", "criminal", "folk-hero",
        "hermit", "entertainer", "guild-artisan", "outlander", "sage", "sailor",
        "acolyte", "charlatan", "knight", "pirate", "spy", "gladiator",
    ),
    ContentCategory.CLASSES: (
        "artificer", "barbarian", "bard", "cleric", "druid", "fighter", "monk",
        "paladin", "ranger", "rogue", "sorcerer", "warlock", "wizard", "bloodhunter",
    ),
    ContentCategory.RACES: (
        "human", "elf", "dwarf", "halfling", "dragonborn", "gnome", "half-elf",
        "half-orc", "tiefling", "aasimar", "genasi", "goliath", "tabaxi",
    ),
    ContentCategory.SPELLS: (
        "fireball", "healing-word", "magic-missile", "cure-wounds", "shield",
        "thunderwave", "sleep", "charm-person", "detect-magic", "light",
    ),
}

EntrySource = Literal["index", "auto-detected"]


class ContentIndexEntry(BaseModel):
    """One discovered custom content file."""

    name: str
    filename: str
    description: str
    source: EntrySource


class LookupResult(BaseModel):
    """Outcome of a name lookup: where the record came from, and the record."""

    source: Literal["remote", "local"]
    data: ContentRecord


class PortableExport(BaseModel):
    """Wrapped export document: the ledger plus a timestamp and format version."""

    model_config = ConfigDict(populate_by_name=True)

    export_date: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        alias="exportDate",
    )
    version: str = EXPORT_VERSION
    characters: list[CharacterRecord] = Field(default_factory=list)
