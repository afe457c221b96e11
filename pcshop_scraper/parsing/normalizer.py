"""Pure functions for canonicalizing description text.

All functions accept None and return an empty string for it.
"""

import re
from typing import Optional

_COLON_PATTERN = re.compile(r"\s*[:：]\s*")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_PARENTHESES_PATTERN = re.compile(r"\(\s*(.*?)\s*\)")


def collapse_whitespace(text: Optional[str]) -> str:
    """Replace NBSP, collapse whitespace runs and strip."""
    if not text:
        return ""
    return _WHITESPACE_PATTERN.sub(" ", text.replace("\u00a0", " ")).strip()


def tighten_parentheses(text: str) -> str:
    """Remove whitespace directly inside parentheses: "( AIO )" -> "(AIO)"."""
    return _PARENTHESES_PATTERN.sub(r"(\1)", text)


def normalize_line(line: Optional[str]) -> str:
    """Canonicalize one raw description line.

    - non-breaking spaces become ordinary spaces
    - ASCII and full-width colons become "Key: Value"
    - runs of whitespace collapse to one space
    - whitespace just inside parentheses is removed

    Normalizing an already normalized line returns it unchanged.

    Examples:
        >>> normalize_line("CPU :\u00a0Ryzen  5 ( AM4 )")
        'CPU: Ryzen 5 (AM4)'
        >>> normalize_line("RAM：16GB")
        'RAM: 16GB'
    """
    if not line:
        return ""

    text = line.replace("\u00a0", " ").strip()
    text = _COLON_PATTERN.sub(": ", text)
    text = _WHITESPACE_PATTERN.sub(" ", text)
    text = tighten_parentheses(text)
    return text.strip()


def clean_value(value: Optional[str]) -> str:
    """Normalize an extracted value (whitespace and parentheses only)."""
    return tighten_parentheses(collapse_whitespace(value)).strip()


def strip_colons(text: Optional[str]) -> str:
    """Turn every colon and its surrounding whitespace into one space."""
    if not text:
        return ""
    return clean_value(_COLON_PATTERN.sub(" ", text.replace("\u00a0", " ")))


def normalize_resolution(text: Optional[str]) -> str:
    """Normalize a display resolution string ("QHD ● 2560 x 1440")."""
    if not text:
        return ""
    text = text.replace("\u00a0", " ").replace("●", " ")
    text = _WHITESPACE_PATTERN.sub(" ", text)
    text = re.sub(r"\s*:\s*", ": ", text)
    return text.strip()
