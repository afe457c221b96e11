"""Attribute resolvers for product description lines.

Each resolver strategy is a pure function of one line view and the current
AttributeSet that returns a value or None. Strategies are grouped into
priority tiers; a tier is applied to every line in document order before the
next tier starts, so a keyed "CPU: ..." line always beats a freeform match on
an earlier line. This tier-major order intentionally replaces trying every
strategy per line; do not change it back to line-major evaluation.

Priority table:
    1. keyed      - "Key: Value" pair whose key is in the attribute's key set
                    (bare GPU brands look ahead to the next line)
    2. heading    - "Processor" / "Graphics" / "Resolution" lines use the rest
                    of the line or the next line; "Memory" looks ahead only
                    from a bare heading line ("Memory" or "Memory:")
    3. freeform   - domain tokens anywhere in the line
    4. positional - CPU only, after all tiers (see cpu_positional_fallback)
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from loguru import logger

from pcshop_scraper.models import AttributeKey, AttributeSet
from pcshop_scraper.parsing.normalizer import clean_value, normalize_resolution
from pcshop_scraper.parsing.pair_extractor import KeyValuePair, extract_pairs


CPU_KEYS = frozenset({"cpu"})
RAM_KEYS = frozenset({"ram"})
STORAGE_KEYS = frozenset({"m2", "ssd", "storage", "hdd", "pcie"})
GPU_KEYS = frozenset(
    {"gpu", "graphics", "graphicsamd", "vga", "amd", "amdradeon", "intel", "nvidia"}
)
PSU_KEYS = frozenset({"psu"})
CASE_KEYS = frozenset({"case"})
RESOLUTION_KEYS = frozenset({"resolution"})

# Resolution stops once these are all filled
REQUIRED_KEYS: tuple[AttributeKey, ...] = ("cpu", "ram", "storage", "psu", "case")

# Attributes that allow the CPU positional fallback
CPU_FALLBACK_TRIGGERS: tuple[AttributeKey, ...] = ("ram", "storage", "psu", "case")

BRAND_ONLY_PATTERN = re.compile(r"^(amd|nvidia|intel|ati)$", re.IGNORECASE)

CPU_FAMILY_PATTERN = re.compile(
    r"\b(?:i[3579]|ultra\s+[579]|ryzen|xeon|threadripper|athlon|pentium|celeron)\b"
    r"|\b\d+(?:\.\d+)?\s*GHz\b",
    re.IGNORECASE,
)
CPU_LIKE_PATTERN = re.compile(
    r"\b(?:i[3579]|intel|amd|ryzen|xeon|threadripper|athlon)\b|\d+(?:\.\d+)?\s*GHz",
    re.IGNORECASE,
)
GPU_MODEL_PATTERN = re.compile(
    r"\b(?:FirePro|Radeon|GeForce|GTX|RTX|Quadro|RX|Vega|Titan)\b", re.IGNORECASE
)

DDR_CAPACITY_PATTERN = re.compile(
    r"\b(DDR[345]X?)\b\s*[,;:-]?\s*(\d+(?:\.\d+)?)\s*GB\b", re.IGNORECASE
)
CAPACITY_DDR_PATTERN = re.compile(
    r"\b(\d+(?:\.\d+)?)\s*GB\b\s*[,;:-]?\s*(DDR[345]X?)\b", re.IGNORECASE
)
DDR_PATTERN = re.compile(r"\b(DDR[345]X?)\b", re.IGNORECASE)
RAM_CAPACITY_PATTERN = re.compile(r"\b(\d+(?:\.\d+)?)\s*GB\b", re.IGNORECASE)

STORAGE_TOKEN_PATTERN = re.compile(
    r"\b(m\.?2|nvme|mvme|pci-?e|ssd|hdd|storage)\b", re.IGNORECASE
)
STORAGE_TYPE_PATTERN = re.compile(r"(?<!/)\b(m\.?2|ssd|hdd)\b", re.IGNORECASE)
PCIE_PATTERN = re.compile(r"\bpci-?e\s*-?\s*(?:gen\s*)?(\d(?:\.\d)?)?\b", re.IGNORECASE)
NVME_PATTERN = re.compile(r"\b(?:nvme|mvme)\b", re.IGNORECASE)
STORAGE_CAPACITY_PATTERN = re.compile(r"\b(\d+(?:\.\d+)?)\s*(TB|GB)\b", re.IGNORECASE)
M2_UNIT_PATTERN = re.compile(r"/\s*m\.?2\b", re.IGNORECASE)

RESOLUTION_PATTERN = re.compile(
    r"\b(\d{3,4}\s*[x×]\s*\d{3,4}(?:\s*at\s*\d+\s*Hz)?)\b|\b(QHD|FHD|UHD|4K|HD)\b",
    re.IGNORECASE,
)

PROCESSOR_HEADING = re.compile(r"^processor\b[:\s-]*(.*)$", re.IGNORECASE)
MEMORY_HEADING = re.compile(r"^memory\s*[:-]?\s*$", re.IGNORECASE)
MEMORY_INLINE = re.compile(r"^memory\s*[:-]\s*(.+)$", re.IGNORECASE)
GRAPHICS_HEADING = re.compile(r"^graphics(?:\s+card)?\b[:\s-]*(.*)$", re.IGNORECASE)
RESOLUTION_HEADING = re.compile(r"^resolution\b[:\s-]*(.+)$", re.IGNORECASE)


@dataclass(frozen=True)
class LineView:
    """One normalized line together with its neighbours and extracted pairs."""

    lines: Sequence[str]
    index: int
    pairs: tuple[KeyValuePair, ...]

    @property
    def text(self) -> str:
        return self.lines[self.index]

    @property
    def next_line(self) -> str:
        """Next non-empty line, or an empty string at the end of the block."""
        for line in self.lines[self.index + 1 :]:
            if line and line.strip():
                return clean_value(line)
        return ""

    def value_for(self, keys: frozenset[str]) -> Optional[str]:
        for pair in self.pairs:
            if pair.key in keys:
                return pair.value
        return None


Strategy = Callable[[LineView, AttributeSet], Optional[str]]


def _prefer_model_over_brand(value: str, view: LineView) -> str:
    """Replace a bare brand ("AMD") with the next line when there is one."""
    if BRAND_ONLY_PATTERN.match(value) and view.next_line:
        return view.next_line
    return value


# --- storage ---------------------------------------------------------------


def _storage_parts(text: str) -> list[str]:
    parts = []

    type_match = STORAGE_TYPE_PATTERN.search(text)
    if type_match:
        token = type_match.group(1)
        parts.append("M.2" if token.lower().startswith("m") else token.upper())

    pcie_match = PCIE_PATTERN.search(text)
    if pcie_match:
        version = pcie_match.group(1)
        parts.append(f"PCIe {version}" if version else "PCIe")

    if NVME_PATTERN.search(text):
        parts.append("NVMe")

    capacity = STORAGE_CAPACITY_PATTERN.search(text)
    if capacity:
        parts.append(f"{capacity.group(1)}{capacity.group(2).upper()}")

    return parts


def canonicalize_storage(text: Optional[str]) -> str:
    """Rebuild a storage description from its recognized sub-tokens.

    Order: interface type, PCIe version, NVMe marker, capacity. Text without
    any recognized token is returned cleaned but otherwise unchanged.

    Examples:
        >>> canonicalize_storage("m.2 pcie4.0 2 tb")
        'M.2 PCIe 4.0 2TB'
        >>> canonicalize_storage("512GB NVMe SSD")
        'SSD NVMe 512GB'
    """
    cleaned = clean_value(text)
    return " ".join(_storage_parts(cleaned)) or cleaned


def _storage_chunk(text: str) -> Optional[str]:
    """Part of a comma separated line that mentions storage, if any."""
    if M2_UNIT_PATTERN.search(text) and not re.search(
        r"\b(?:nvme|mvme|pci-?e|ssd|hdd|storage)\b", text, re.IGNORECASE
    ):
        return None  # "cd/m2" is a brightness unit
    for chunk in re.split(r"[,;|]", text):
        if STORAGE_TOKEN_PATTERN.search(chunk):
            return chunk
    return None


def keyed_storage(view: LineView, attributes: AttributeSet) -> Optional[str]:
    for pair in view.pairs:
        if pair.key in STORAGE_KEYS:
            if _storage_parts(pair.value):
                return canonicalize_storage(f"{pair.raw_key} {pair.value}")
            return pair.value
    return None


def freeform_storage(view: LineView, attributes: AttributeSet) -> Optional[str]:
    chunk = _storage_chunk(view.text)
    if chunk is None:
        return None
    parts = _storage_parts(chunk)
    return " ".join(parts) if parts else None


# --- RAM -------------------------------------------------------------------


def parse_ram_tokens(text: Optional[str], allow_bare_capacity: bool = False) -> Optional[str]:
    """Extract a DDR generation and capacity in either order.

    Examples:
        >>> parse_ram_tokens("8GB DDR4 3200MHz")
        'DDR4 8GB'
        >>> parse_ram_tokens("DDR5X")
        'DDR5X'
        >>> parse_ram_tokens("16 GB", allow_bare_capacity=True)
        '16GB'
    """
    if not text:
        return None

    candidates = []
    match = DDR_CAPACITY_PATTERN.search(text)
    if match:
        candidates.append((match.start(), match.group(1), match.group(2)))
    match = CAPACITY_DDR_PATTERN.search(text)
    if match:
        candidates.append((match.start(), match.group(2), match.group(1)))

    if candidates:
        _, ddr, capacity = min(candidates)
        return f"{ddr.upper()} {capacity}GB"

    ddr_match = DDR_PATTERN.search(text)
    if ddr_match:
        return ddr_match.group(1).upper()

    if allow_bare_capacity:
        capacity_match = RAM_CAPACITY_PATTERN.search(text)
        if capacity_match:
            return f"{capacity_match.group(1)}GB"

    return None


def keyed_ram(view: LineView, attributes: AttributeSet) -> Optional[str]:
    return view.value_for(RAM_KEYS)


def memory_heading(view: LineView, attributes: AttributeSet) -> Optional[str]:
    """RAM from "Memory: <value>" or from the line after a bare "Memory" heading.

    Lines that merely start with the word ("Memory card reader") are not
    headings and never look ahead.
    """
    if MEMORY_HEADING.match(view.text):
        return parse_ram_tokens(view.next_line, allow_bare_capacity=True)

    match = MEMORY_INLINE.match(view.text)
    if match:
        return parse_ram_tokens(match.group(1), allow_bare_capacity=True)
    return None


def freeform_ram(view: LineView, attributes: AttributeSet) -> Optional[str]:
    return parse_ram_tokens(view.text)


# --- CPU -------------------------------------------------------------------


def keyed_cpu(view: LineView, attributes: AttributeSet) -> Optional[str]:
    return view.value_for(CPU_KEYS)


def processor_heading(view: LineView, attributes: AttributeSet) -> Optional[str]:
    match = PROCESSOR_HEADING.match(view.text)
    if not match:
        return None
    return clean_value(match.group(1)) or view.next_line or None


def freeform_cpu(view: LineView, attributes: AttributeSet) -> Optional[str]:
    if CPU_FAMILY_PATTERN.search(view.text):
        return clean_value(view.text)
    return None


def cpu_positional_fallback(
    lines: Sequence[str], attributes: AttributeSet
) -> Optional[str]:
    """Guess the CPU line of a listing that names other parts but no CPU.

    Tries, in order: the first line without a colon that looks like a CPU,
    the second line without a colon, the second "Key: Value" value across
    all lines (the first when there is only one).
    """
    if attributes.has("cpu") or not attributes.has_any(CPU_FALLBACK_TRIGGERS):
        return None

    non_keyed = [line for line in lines if line and not re.search(r"[:：]", line)]
    for line in non_keyed:
        if CPU_LIKE_PATTERN.search(line):
            return clean_value(line)

    if len(non_keyed) > 1:
        return clean_value(non_keyed[1])

    values = [pair.value for line in lines for pair in extract_pairs(line)]
    if values:
        return values[1] if len(values) > 1 else values[0]

    return None


# --- GPU -------------------------------------------------------------------


def keyed_gpu(view: LineView, attributes: AttributeSet) -> Optional[str]:
    value = view.value_for(GPU_KEYS)
    if value is None:
        return None
    return _prefer_model_over_brand(value, view)


def graphics_heading(view: LineView, attributes: AttributeSet) -> Optional[str]:
    match = GRAPHICS_HEADING.match(view.text)
    if not match:
        return None

    after = clean_value(match.group(1))
    next_line = view.next_line

    if after and GPU_MODEL_PATTERN.search(after):
        return after
    if next_line and GPU_MODEL_PATTERN.search(next_line):
        return next_line
    if after:
        return _prefer_model_over_brand(after, view)
    return next_line or None


def freeform_gpu(view: LineView, attributes: AttributeSet) -> Optional[str]:
    if GPU_MODEL_PATTERN.search(view.text):
        return clean_value(view.text)
    return None


# --- PSU / case --------------------------------------------------------------


def keyed_psu(view: LineView, attributes: AttributeSet) -> Optional[str]:
    return view.value_for(PSU_KEYS)


def keyed_case(view: LineView, attributes: AttributeSet) -> Optional[str]:
    return view.value_for(CASE_KEYS)


# --- resolution --------------------------------------------------------------


def keyed_resolution(view: LineView, attributes: AttributeSet) -> Optional[str]:
    value = view.value_for(RESOLUTION_KEYS)
    return normalize_resolution(value) or None


def resolution_heading(view: LineView, attributes: AttributeSet) -> Optional[str]:
    match = RESOLUTION_HEADING.match(normalize_resolution(view.text))
    if not match:
        return None
    return normalize_resolution(match.group(1)) or None


def freeform_resolution(view: LineView, attributes: AttributeSet) -> Optional[str]:
    match = RESOLUTION_PATTERN.search(normalize_resolution(view.text))
    if not match:
        return None
    return (match.group(1) or match.group(2)).strip()


STRATEGY_TIERS: tuple[tuple[str, tuple[tuple[AttributeKey, Strategy], ...]], ...] = (
    (
        "keyed",
        (
            ("cpu", keyed_cpu),
            ("ram", keyed_ram),
            ("storage", keyed_storage),
            ("gpu", keyed_gpu),
            ("psu", keyed_psu),
            ("case", keyed_case),
            ("resolution", keyed_resolution),
        ),
    ),
    (
        "heading",
        (
            ("cpu", processor_heading),
            ("ram", memory_heading),
            ("gpu", graphics_heading),
            ("resolution", resolution_heading),
        ),
    ),
    (
        "freeform",
        (
            ("cpu", freeform_cpu),
            ("ram", freeform_ram),
            ("storage", freeform_storage),
            ("gpu", freeform_gpu),
            ("resolution", freeform_resolution),
        ),
    ),
)


def _apply_tier(
    tier: str,
    strategies: tuple[tuple[AttributeKey, Strategy], ...],
    views: list[LineView],
    attributes: AttributeSet,
) -> bool:
    """Run one tier over all lines. Returns True once all required keys are set."""
    for view in views:
        for key, strategy in strategies:
            if attributes.has(key):
                continue
            value = strategy(view, attributes)
            if value and attributes.set(key, value):
                logger.debug(f"Resolved {key} ({tier}, line {view.index}): {value}")
        if attributes.has_all(REQUIRED_KEYS):
            return True
    return False


def resolve_attributes(lines: Sequence[str]) -> AttributeSet:
    """Resolve structured attributes from normalized description lines.

    Args:
        lines: Normalized description lines in document order

    Returns:
        AttributeSet with every attribute that could be resolved
    """
    attributes = AttributeSet()
    views = [
        LineView(lines=lines, index=index, pairs=tuple(extract_pairs(line)))
        for index, line in enumerate(lines)
        if line
    ]

    for tier, strategies in STRATEGY_TIERS:
        if _apply_tier(tier, strategies, views, attributes):
            break

    cpu = cpu_positional_fallback(lines, attributes)
    if cpu and attributes.set("cpu", cpu):
        logger.debug(f"Resolved cpu (positional): {cpu}")

    return attributes
