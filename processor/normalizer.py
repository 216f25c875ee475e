"""Event name normalization for matching and for display."""
import re
from typing import Optional, Sequence

# Users ask about "graduation"; the calendar lists the commencement ceremony.
SYNONYMS = {
    'graduation': 'commencement ceremony',
}

_NON_ALPHANUMERIC = re.compile(r'[^a-z0-9]')
_DAY_SUFFIX = re.compile(r' Day \d+$')
_DAY_DIGIT = re.compile(r'\bDay \d\b')
_PAREN_DIGIT = re.compile(r' ?\(\d\)')
_WHITESPACE = re.compile(r'\s+')


def normalize_query_key(text: str) -> str:
    """
    Reduce an event name to the key used for fuzzy comparison.

    Args:
        text: Query string or index key

    Returns:
        Lowercase string of ASCII letters and digits only
    """
    key = text.lower()
    for term, replacement in SYNONYMS.items():
        key = key.replace(term, replacement)
    return _NON_ALPHANUMERIC.sub('', key)


def clean_display_name(name: str) -> str:
    """
    Strip disambiguation artifacts ("Day 2", "(1)") from an event name.

    Only for user-facing output; index keys are never cleaned.
    """
    cleaned = None
    while cleaned != name:
        cleaned = name
        name = _WHITESPACE.sub(' ', name).strip()
        name = _DAY_DIGIT.sub('', _DAY_SUFFIX.sub('', name))
        name = _PAREN_DIGIT.sub('', name)
    return cleaned


def join_names(names: Sequence[str]) -> Optional[str]:
    """
    Join event names into a natural-language list.

    Args:
        names: Event names in output order

    Returns:
        None for no names, "A", "A and B", or "A, B, and C"
    """
    if not names:
        return None
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return f"{', '.join(names[:-1])}, and {names[-1]}"
