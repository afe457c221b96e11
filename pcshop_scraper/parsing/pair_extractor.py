"""Extraction of "Key: Value" pairs from a single normalized line."""

import re
from dataclasses import dataclass
from typing import Optional

from pcshop_scraper.parsing.normalizer import clean_value

_COLON_SPLIT = re.compile(r"\s*[:：]\s*")
_LEADING_PAIR = re.compile(r"^([^:：]+)\s*[:：]\s*(.+)$")


@dataclass(frozen=True)
class KeyValuePair:
    """One key/value token found in a line."""

    raw_key: str
    value: str

    @property
    def key(self) -> str:
        return normalize_key(self.raw_key)


def normalize_key(raw_key: Optional[str]) -> str:
    """Lower-case a key and drop everything that is not a letter or digit.

    Examples:
        >>> normalize_key("M.2")
        'm2'
        >>> normalize_key("PCI-E")
        'pcie'
    """
    if not raw_key:
        return ""
    return re.sub(r"[^a-z0-9]", "", raw_key.lower())


def _scan_pairs(line: str) -> list[KeyValuePair]:
    """Split a line on colons and pair each key with the text after it.

    The last word before a colon starts the next key, so
    "CPU: Ryzen 5 RAM: 16GB" yields CPU -> "Ryzen 5" and RAM -> "16GB".
    """
    segments = _COLON_SPLIT.split(line)
    if len(segments) < 2:
        return []

    pairs = []
    key = segments[0].strip()
    for position, segment in enumerate(segments[1:], start=1):
        is_last = position == len(segments) - 1
        segment = segment.strip()

        if is_last:
            value, next_key = segment, ""
        else:
            words = segment.split(" ")
            value, next_key = " ".join(words[:-1]), words[-1]

        value = clean_value(value)
        if key and value:
            pairs.append(KeyValuePair(raw_key=key, value=value))
        key = next_key

    return pairs


def extract_pairs(line: Optional[str]) -> list[KeyValuePair]:
    """Find every "Key: Value" pair in one normalized line.

    Falls back to a single leading "key: rest-of-line" match when the scan
    finds nothing. Within a line the first occurrence of a key wins.

    Args:
        line: Normalized description line

    Returns:
        Pairs in order of appearance
    """
    if not line:
        return []

    pairs = _scan_pairs(line)
    if not pairs:
        match = _LEADING_PAIR.match(line)
        if match and match.group(1).strip() and clean_value(match.group(2)):
            pairs = [
                KeyValuePair(
                    raw_key=match.group(1).strip(), value=clean_value(match.group(2))
                )
            ]

    seen: set[str] = set()
    unique_pairs = []
    for pair in pairs:
        if pair.key in seen:
            continue
        seen.add(pair.key)
        unique_pairs.append(pair)

    return unique_pairs
