"""Tests for custom content discovery (IndexLoader)."""

from pathlib import Path

import pytest

from dnd_companion.discovery import IndexLoader, candidate_filenames
from dnd_companion.fetcher import ContentParseError, ContentUnreachable, DirectoryFetcher
from dnd_companion.models import ContentCategory
from tests.stubs import StubFetcher


# ── Candidate filenames ─────────────────────────────────


def test_candidates_start_with_variants_of_first_name():
    assert candidate_filenames(ContentCategory.SPELLS)[:6] == [
        "fireball.json",
        "healing-word.json", "healing_word.json", "healingword.json",
        "magic-missile.json", "magic_missile.json",
    ]


def test_candidates_deduplicated():
    candidates = candidate_filenames(ContentCategory.BACKGROUNDS)
    assert len(candidates) == len(set(candidates))
    assert candidates.count("chef.json") == 1


def test_candidates_prefix_only_first_five_names():
    candidates = candidate_filenames(ContentCategory.CLASSES)
    for name in ("artificer", "barbarian", "bard", "cleric", "druid"):
        for prefix in ("custom-", "my-", "homebrew-"):
            assert f"{prefix}{name}.json" in candidates
    assert "custom-fighter.json" not in candidates


def test_candidates_prefix_uses_hyphenated_form():
    candidates = candidate_filenames(ContentCategory.SPELLS)
    assert "custom-healing-word.json" in candidates
    assert "custom-healing_word.json" not in candidates


def test_candidates_count():
    # 10 spells: 5 hyphenated names give 3 variants, 5 give 1 → 20; plus 15 prefixed
    assert len(candidate_filenames(ContentCategory.SPELLS)) == 35


def test_candidates_prefixed_come_last():
    candidates = candidate_filenames(ContentCategory.RACES)
    assert candidates[-1] == "homebrew-dragonborn.json"


# ── build_index ─────────────────────────────────────────


async def test_empty_when_nothing_exists():
    loader = IndexLoader(StubFetcher())
    assert await loader.build_index(ContentCategory.SPELLS) == []


@pytest.mark.parametrize("category", list(ContentCategory))
async def test_never_raises_when_everything_fails(category):
    fetcher = StubFetcher({"index.json": ContentUnreachable("offline")})
    assert await IndexLoader(fetcher).build_index(category) == []


async def test_index_entry_uses_content_name():
    fetcher = StubFetcher({
        "index.json": {"backgrounds": [
            {"name": "Declared", "filename": "street-cook.json", "description": "Cooks"},
        ]},
        "backgrounds/street-cook.json": {"name": "Street Cook"},
    })
    entries = await IndexLoader(fetcher).build_index(ContentCategory.BACKGROUNDS)
    assert len(entries) == 1
    assert entries[0].name == "Street Cook"
    assert entries[0].filename == "street-cook.json"
    assert entries[0].description == "Cooks"
    assert entries[0].source == "index"


async def test_index_entry_falls_back_to_declared_name_and_default_description():
    fetcher = StubFetcher({
        "index.json": {"classes": [{"name": "Gunslinger", "filename": "gunslinger.json"}]},
        "classes/gunslinger.json": {"hit_die": 10},
    })
    entries = await IndexLoader(fetcher).build_index("classes")
    assert entries[0].name == "Gunslinger"
    assert entries[0].description == "Custom class"


async def test_index_entry_skipped_when_file_missing():
    fetcher = StubFetcher({
        "index.json": {"races": [
            {"name": "Ghost", "filename": "ghost.json"},
            {"name": "Owlin", "filename": "owlin.json"},
        ]},
        "races/owlin.json": {"name": "Owlin"},
        "races/ghost.json": ContentParseError("bad json"),
    })
    entries = await IndexLoader(fetcher).build_index(ContentCategory.RACES)
    assert [e.name for e in entries] == ["Owlin"]


async def test_malformed_index_treated_as_empty():
    fetcher = StubFetcher({
        "index.json": ["not", "an", "object"],
        "spells/fireball.json": {"name": "Fireball"},
    })
    entries = await IndexLoader(fetcher).build_index(ContentCategory.SPELLS)
    assert [(e.name, e.source) for e in entries] == [("Fireball", "auto-detected")]


async def test_malformed_index_entries_skipped():
    fetcher = StubFetcher({
        "index.json": {"spells": ["fireball.json", {"name": "No file"}]},
    })
    assert await IndexLoader(fetcher).build_index(ContentCategory.SPELLS) == []


async def test_auto_detected_entry():
    fetcher = StubFetcher({"backgrounds/my-chef.json": {"name": "Sous Chef"}})
    entries = await IndexLoader(fetcher).build_index(ContentCategory.BACKGROUNDS)
    assert len(entries) == 1
    assert entries[0].name == "Sous Chef"
    assert entries[0].filename == "my-chef.json"
    assert entries[0].description == "Auto-detected custom background"
    assert entries[0].source == "auto-detected"


async def test_auto_detected_requires_name():
    fetcher = StubFetcher({
        "spells/fireball.json": {"level": 3},
        "spells/shield.json": {"name": ""},
        "spells/sleep.json": ["not", "an", "object"],
    })
    assert await IndexLoader(fetcher).build_index(ContentCategory.SPELLS) == []


async def test_indexed_filename_not_probed_again():
    fetcher = StubFetcher({
        "index.json": {"spells": [{"name": "Fireball", "filename": "fireball.json"}]},
        "spells/fireball.json": {"name": "Fireball"},
    })
    entries = await IndexLoader(fetcher).build_index(ContentCategory.SPELLS)
    assert [e.source for e in entries] == ["index"]
    assert fetcher.calls.count("spells/fireball.json") == 1


async def test_index_entries_come_first():
    fetcher = StubFetcher({
        "index.json": {"spells": [{"name": "Zap", "filename": "zap.json"}]},
        "spells/zap.json": {"name": "Zap"},
        "spells/light.json": {"name": "Light"},
    })
    entries = await IndexLoader(fetcher).build_index(ContentCategory.SPELLS)
    assert [e.name for e in entries] == ["Zap", "Light"]


async def test_same_name_under_two_filenames_not_collapsed():
    """Known limitation: one name reachable via two filenames yields two entries."""
    fetcher = StubFetcher({
        "index.json": {"spells": [{"name": "Fireball", "filename": "big-boom.json"}]},
        "spells/big-boom.json": {"name": "Fireball"},
        "spells/fireball.json": {"name": "Fireball"},
    })
    entries = await IndexLoader(fetcher).build_index(ContentCategory.SPELLS)
    assert [(e.name, e.source) for e in entries] == [
        ("Fireball", "index"), ("Fireball", "auto-detected"),
    ]


async def test_reads_from_directory(content_dir: Path, write_json):
    write_json("index.json", {"races": [{"name": "Owlin", "filename": "owlin.json"}]})
    write_json("races/owlin.json", {"name": "Owlin"})
    write_json("races/half_elf.json", {"name": "Half-Elf (Homebrew)"})
    entries = await IndexLoader(DirectoryFetcher(content_dir)).build_index(ContentCategory.RACES)
    assert [(e.filename, e.source) for e in entries] == [
        ("owlin.json", "index"), ("half_elf.json", "auto-detected"),
    ]


# ── build_all ───────────────────────────────────────────


async def test_build_all_scans_every_category():
    fetcher = StubFetcher({
        "backgrounds/sage.json": {"name": "Sage"},
        "spells/light.json": {"name": "Light"},
    })
    found = await IndexLoader(fetcher).build_all()
    assert set(found) == set(ContentCategory)
    assert [e.name for e in found[ContentCategory.BACKGROUNDS]] == ["Sage"]
    assert found[ContentCategory.CLASSES] == []
    assert found[ContentCategory.RACES] == []
    assert [e.name for e in found[ContentCategory.SPELLS]] == ["Light"]


async def test_build_all_logs_summary(caplog):
    caplog.set_level("INFO", logger="dnd_companion.discovery")
    await IndexLoader(StubFetcher({"spells/light.json": {"name": "Light"}})).build_all()
    assert "Found 1 custom content files" in caplog.text


async def test_build_all_reads_from_directory(content_dir: Path, write_json):
    write_json("classes/my-bard.json", {"name": "Skald"})
    write_json("spells/cure_wounds.json", {"name": "Cure Wounds"})
    found = await IndexLoader(DirectoryFetcher(content_dir)).build_all()
    assert [e.filename for e in found[ContentCategory.CLASSES]] == ["my-bard.json"]
    assert [e.filename for e in found[ContentCategory.SPELLS]] == ["cure_wounds.json"]
    assert found[ContentCategory.RACES] == []
