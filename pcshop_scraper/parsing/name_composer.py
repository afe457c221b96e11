"""Canonical product name composition.

Following the same rules for every listing keeps names, and therefore
fingerprints and codes, deterministic across runs.
"""

import re
from typing import Optional, Sequence

from pcshop_scraper.models import HARDWARE_KEYS, AttributeKey, AttributeSet, RawProduct
from pcshop_scraper.parsing.normalizer import (
    clean_value,
    collapse_whitespace,
    normalize_resolution,
    strip_colons,
    tighten_parentheses,
)

MAX_NAME_LENGTH = 256
MAX_REPEATED_PHRASE_WORDS = 6

PRIMARY_KEYS: tuple[AttributeKey, ...] = ("cpu", "ram", "storage", "gpu")
SECONDARY_KEYS: tuple[AttributeKey, ...] = ("psu", "case")

# (pattern, replacement) applied in order to every appended token
SPEC_SPELLINGS = [
    (re.compile(r"\b[mn]vme\b", re.IGNORECASE), "NVMe"),
    (re.compile(r"\bm\.?2\b", re.IGNORECASE), "M.2"),
    (re.compile(r"\bssd\b", re.IGNORECASE), "SSD"),
    (re.compile(r"\bpci-?e\s*-?\s*(\d+(?:\.\d+)?)\b", re.IGNORECASE), r"PCIe \1"),
    (re.compile(r"\bpci-?e\b", re.IGNORECASE), "PCIe"),
]


def select_title_candidate(lines: Sequence[str]) -> str:
    """First line without a colon and longer than 3 characters, else the first line."""
    for line in lines:
        if line and not re.search(r"[:：]", line) and len(line) > 3:
            return line
    return lines[0] if lines else ""


def normalize_spec_token(token: Optional[str]) -> str:
    """Canonical spelling for storage words inside a name token.

    Examples:
        >>> normalize_spec_token("m2 mvme ssd")
        'M.2 NVMe SSD'
        >>> normalize_spec_token("pcie4.0")
        'PCIe 4.0'
    """
    text = collapse_whitespace(token)
    for pattern, replacement in SPEC_SPELLINGS:
        text = pattern.sub(replacement, text)
    return collapse_whitespace(text)


def collapse_repeated_phrases(text: str, max_words: int = MAX_REPEATED_PHRASE_WORDS) -> str:
    """Remove immediately repeated word sequences ("16GB 16GB" -> "16GB").

    Comparison is case-insensitive; the first occurrence is kept.
    """
    words = text.split()
    index = 0
    while index < len(words):
        removed = False
        longest = min(max_words, (len(words) - index) // 2)
        for length in range(longest, 0, -1):
            first = [word.lower() for word in words[index : index + length]]
            second = [word.lower() for word in words[index + length : index + 2 * length]]
            if first == second:
                del words[index + length : index + 2 * length]
                removed = True
                break
        if not removed:
            index += 1
    return " ".join(words)


def _tokens_to_append(attributes: AttributeSet) -> list[str]:
    if attributes.has_any(PRIMARY_KEYS):
        keys = PRIMARY_KEYS
    else:
        keys = SECONDARY_KEYS

    tokens = [collapse_whitespace(attributes.get(key)) for key in keys if attributes.has(key)]

    is_monitor = not attributes.has_any(HARDWARE_KEYS) and attributes.has("resolution")
    if is_monitor:
        tokens.insert(0, normalize_resolution(attributes.get("resolution")))

    return tokens


def compose_name(
    title_candidate: Optional[str],
    visible_title: Optional[str],
    attributes: AttributeSet,
) -> str:
    """Build the canonical display name of a product.

    Args:
        title_candidate: Title-like description line
        visible_title: Title shown on the product card, if any
        attributes: Resolved attributes

    Returns:
        Name of at most MAX_NAME_LENGTH characters
    """
    base = collapse_whitespace(strip_colons(title_candidate))
    prefix = collapse_whitespace(visible_title)

    combined = base
    if prefix and not base.lower().startswith(prefix.lower()):
        combined = f"{prefix} {base}"

    base_lower = base.lower()
    prefix_lower = prefix.lower()
    seen: set[str] = set()
    appended = []
    for raw_token in _tokens_to_append(attributes):
        token = normalize_spec_token(raw_token)
        token_lower = token.lower()
        if not token or token_lower in seen:
            continue
        if token_lower in base_lower or token_lower in prefix_lower:
            continue
        seen.add(token_lower)
        appended.append(token)

    if appended:
        combined = f"{combined} {' '.join(appended)}"

    name = tighten_parentheses(collapse_repeated_phrases(combined)).strip()
    return name[:MAX_NAME_LENGTH]


def derive_product_name(
    lines: Sequence[str], raw: RawProduct, attributes: AttributeSet
) -> str:
    """Name for a scraped product, falling back through the card's other texts.

    Description lines win; otherwise the visible title, the product link
    title, the brand and the category are tried in that order. An empty
    result means the product has no derivable name.
    """
    if lines:
        return compose_name(select_title_candidate(lines), raw.visible_title, attributes)

    for fallback in (raw.visible_title, raw.link_title, raw.brand, raw.category):
        name = clean_value(fallback)
        if name:
            return name[:MAX_NAME_LENGTH]

    return ""
