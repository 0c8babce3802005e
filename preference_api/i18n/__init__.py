"""
i18n (Internationalization) package

Provides Accept-Language parsing, locale detection against the supported
locale list, RTL detection and language metadata.
"""

from .locale import (
    LANGUAGE_NAMES,
    RTL_LOCALES,
    WeightedLanguage,
    detect_locale,
    get_base_language,
    get_language_info,
    is_locale,
    is_rtl_locale,
    parse_accept_language,
    parse_weighted_languages,
)

__all__ = [
    "LANGUAGE_NAMES",
    "RTL_LOCALES",
    "WeightedLanguage",
    "detect_locale",
    "get_base_language",
    "get_language_info",
    "is_locale",
    "is_rtl_locale",
    "parse_accept_language",
    "parse_weighted_languages",
]
