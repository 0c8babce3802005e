"""
Locale helpers

Pure functions for BCP 47 locale handling:
- Accept-Language header parsing with quality-value (q=) support
- Locale detection against the supported-locale list (exact, base-language
  and region fallback matching)
- RTL (right-to-left) language detection
- Language metadata lookup
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import NamedTuple

from preference_api.config import settings

# ── Constants ─────────────────────────────────────────────────────────────────

# BCP 47 base language codes whose scripts read right-to-left
RTL_LOCALES: frozenset[str] = frozenset({"ar", "he", "fa", "ur", "yi", "ku"})

# Human-readable names, keyed by locale code or base language code
LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "fr": "Français",
    "de": "Deutsch",
    "es": "Español",
    "ar": "العربية",
    "zh": "中文",
    "ja": "日本語",
    "pt": "Português",
    "pt-BR": "Português (Brasil)",
    "pt-PT": "Português (Portugal)",
    "it": "Italiano",
    "nl": "Nederlands",
}

DEFAULT_QUALITY = 1.0

# Rank given to entries whose q-value cannot be read
UNPARSABLE_QUALITY = 0.0


class WeightedLanguage(NamedTuple):
    """A language tag from an Accept-Language header with its q-value."""

    tag: str
    quality: float


# ── Accept-Language parsing ───────────────────────────────────────────────────


def _parse_quality(raw: str) -> float:
    """Read a q-value as written; garbage ranks with the least preferred tags.

    Out-of-range numbers are kept (``q=5`` outranks ``q=1``), but anything
    non-numeric or non-finite gets UNPARSABLE_QUALITY so a malformed entry
    can never jump ahead of well-formed ones.
    """
    try:
        quality = float(raw.strip())
    except ValueError:
        return UNPARSABLE_QUALITY
    if not math.isfinite(quality):
        return UNPARSABLE_QUALITY
    return quality


def parse_weighted_languages(header: str | None) -> list[WeightedLanguage]:
    """Parse an Accept-Language header into weighted tags, best first.

    Tags are trimmed and lowercased. A missing q-value means 1.0 and an
    unparsable one ranks the tag as q=0, so a malformed header can never
    raise. The sort is stable: tags with equal quality keep header order.

    Args:
        header: Value of the Accept-Language HTTP header, e.g.
                "fr-CA,fr;q=0.9,en-US;q=0.8,en;q=0.7". ``None`` and the
                empty string both yield an empty list.

    Returns:
        List of WeightedLanguage sorted by descending quality.
    """
    if not header:
        return []

    weighted: list[WeightedLanguage] = []
    for part in header.split(","):
        tag, _, params = part.partition(";")
        tag = tag.strip().lower()
        if not tag:
            continue

        quality = DEFAULT_QUALITY
        for param in params.split(";"):
            name, sep, value = param.partition("=")
            if sep and name.strip().lower() == "q":
                quality = _parse_quality(value)
                break

        weighted.append(WeightedLanguage(tag, quality))

    weighted.sort(key=lambda item: item.quality, reverse=True)
    return weighted


def parse_accept_language(header: str | None) -> list[str]:
    """Return the language tags of an Accept-Language header, best first.

    >>> parse_accept_language("en-GB;q=0.5, fr;q=0.9")
    ['fr', 'en-gb']
    """
    return [item.tag for item in parse_weighted_languages(header)]


# ── Locale detection ──────────────────────────────────────────────────────────


def get_base_language(tag: str) -> str:
    """Return the lowercased language subtag, e.g. "en" from "en-GB"."""
    return tag.replace("_", "-").split("-")[0].strip().lower()


def is_locale(value: object, supported: Sequence[str] | None = None) -> bool:
    """Return True when ``value`` is exactly one of the supported locale codes."""
    if supported is None:
        supported = settings.supported_locales
    return isinstance(value, str) and value in supported


def detect_locale(tags: Sequence[str], supported: Sequence[str] | None = None) -> str | None:
    """Map client language tags to one supported locale.

    Tags are tried in order and the first rule that succeeds wins:

    1. Exact match (case-insensitive): "pt-br" → "pt-BR".
    2. Base-language match: "en-gb" → "en" when "en" is supported.
    3. Region fallback: "pt-pt" → the first supported locale whose base
       language is "pt", in the declared order of ``supported``.

    Args:
        tags:      Language tags, best first (see parse_accept_language).
        supported: Ordered supported locale codes. Defaults to
                   ``settings.supported_locales``.

    Returns:
        The canonical supported locale code, or None if nothing matches.
    """
    if supported is None:
        supported = settings.supported_locales

    by_lower = {code.lower(): code for code in supported}

    for tag in tags:
        tag_lower = tag.strip().lower()
        if not tag_lower or tag_lower == "*":
            continue

        # Exact match
        if tag_lower in by_lower:
            return by_lower[tag_lower]

        # Base language match: "fr-ca" → "fr"
        base = get_base_language(tag_lower)
        if base in by_lower:
            return by_lower[base]

        # Region fallback: "pt-pt" → "pt-BR"
        for code in supported:
            if get_base_language(code) == base:
                return code

    return None


# ── Metadata ──────────────────────────────────────────────────────────────────


def is_rtl_locale(locale: str) -> bool:
    """Return True when the given BCP 47 locale is right-to-left.

    Compares only the base language tag, so both "ar" and "ar-SA" are
    identified as RTL.
    """
    return get_base_language(locale) in RTL_LOCALES


def get_language_info(locale: str) -> dict[str, str | bool]:
    """Return a metadata dict describing the given locale.

    Args:
        locale: BCP 47 locale code, e.g. "ar", "pt-BR".

    Returns:
        Dict with keys: ``code`` (str), ``name`` (str), ``is_rtl`` (bool).
    """
    name = LANGUAGE_NAMES.get(locale) or LANGUAGE_NAMES.get(get_base_language(locale), locale)
    return {
        "code": locale,
        "name": name,
        "is_rtl": is_rtl_locale(locale),
    }
