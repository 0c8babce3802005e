from .preference import Preference, PreferenceUpdate, SafeParseResult, safe_parse

# Define the public API of this module
__all__ = [
    "Preference",
    "PreferenceUpdate",
    "SafeParseResult",
    "safe_parse",
]
