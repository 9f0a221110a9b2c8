"""Name normalization and matching.

Two normalization policies exist and are used at different call sites; they
are intentionally not unified.

  slugify   (policy A): "Magic Missile!" → "magic-missile"
              Used for index entries and for remote API paths.
  name_key  (policy B): "Magic Missile!" → "magicmissile"
              Used to verify a probed file's declared name against a query.

Both are idempotent. Matching is exact equality of normalized forms.
"""

import re

_WHITESPACE = re.compile(r"\s+")
_NOT_SLUG = re.compile(r"[^a-z0-9-]")
_NOT_ALNUM = re.compile(r"[^a-z0-9]")


def slugify(name: str) -> str:
    """Lowercase, collapse whitespace runs to "-", drop anything outside [a-z0-9-].

    "Healing  Word" → "healing-word"
    """
    text = name.lower()
    text = _WHITESPACE.sub("-", text)
    return _NOT_SLUG.sub("", text)


def name_key(name: str) -> str:
    """Lowercase and drop anything outside [a-z0-9].

    "Half-Elf" → "halfelf"
    """
    return _NOT_ALNUM.sub("", name.lower())


def same_slug(a: str, b: str) -> bool:
    return slugify(a) == slugify(b)


def same_key(a: str, b: str) -> bool:
    return name_key(a) == name_key(b)


def filename_variants(slug: str) -> list[str]:
    """Spelling variants of a hyphenated name: hyphenated, underscored, concatenated."""
    return [
        f"{slug}.json",
        f"{slug.replace('-', '_')}.json",
        f"{slug.replace('-', '')}.json",
    ]


CUSTOM_PREFIXES = ("custom-", "my-", "homebrew-")


def prefixed_variants(slug: str) -> list[str]:
    return [f"{prefix}{slug}.json" for prefix in CUSTOM_PREFIXES]
