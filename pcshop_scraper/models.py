"""Data models for the shop scraper.

Branded types (NewType) keep codes, URLs and fingerprints from being mixed
with ordinary strings.
"""

from dataclasses import dataclass, field
from typing import Any, Literal, NewType

# Branded types for type safety
ProductCode = NewType("ProductCode", str)
Fingerprint = NewType("Fingerprint", str)
ImageUrl = NewType("ImageUrl", str)
CategoryUrl = NewType("CategoryUrl", str)
ShopName = NewType("ShopName", str)


AttributeKey = Literal["cpu", "ram", "storage", "gpu", "psu", "case", "resolution"]

ATTRIBUTE_KEYS: tuple[AttributeKey, ...] = (
    "cpu",
    "ram",
    "storage",
    "gpu",
    "psu",
    "case",
    "resolution",
)

# Hardware attributes; resolution alone marks a monitor listing
HARDWARE_KEYS: tuple[AttributeKey, ...] = ("cpu", "ram", "storage", "gpu", "psu", "case")


class AttributeSet:
    """Structured attributes of one product.

    Values are filled incrementally and never overwritten: the first value
    set for a key wins.
    """

    def __init__(self, **values: str | None):
        self._values: dict[AttributeKey, str] = {}
        for key, value in values.items():
            self.set(key, value)  # type: ignore[arg-type]

    def set(self, key: AttributeKey, value: str | None) -> bool:
        """Set ``key`` unless it already has a value.

        Returns:
            True if the value was stored, False if ignored
        """
        if key not in ATTRIBUTE_KEYS:
            raise KeyError(f"Unknown attribute: {key}")
        if not value or key in self._values:
            return False
        self._values[key] = value
        return True

    def get(self, key: AttributeKey) -> str | None:
        return self._values.get(key)

    def has(self, key: AttributeKey) -> bool:
        return key in self._values

    def has_all(self, keys: tuple[AttributeKey, ...]) -> bool:
        return all(key in self._values for key in keys)

    def has_any(self, keys: tuple[AttributeKey, ...]) -> bool:
        return any(key in self._values for key in keys)

    def as_dict(self) -> dict[str, str | None]:
        """All attribute keys in canonical order, unset ones as None."""
        return {key: self._values.get(key) for key in ATTRIBUTE_KEYS}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeSet):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"AttributeSet({self._values!r})"


@dataclass
class RawProduct:
    """Product fields as read from a category page. Every field may be absent."""

    spec_lines: list[str] = field(default_factory=list)
    visible_title: str | None = None
    brand: str | None = None
    category: str | None = None
    price: str | None = None
    image: ImageUrl | None = None
    raw_markup: str | None = None
    link_title: str | None = None  # title/text of the product link


@dataclass
class ProductRecord:
    """Finished product, ready for the output sinks."""

    code: ProductCode
    name: str  # "<composed name> - <code>"
    base_name: str  # composed name without the code
    brand: str | None
    category: str | None
    price: str
    image: ImageUrl | None
    spec_lines: list[str]
    raw_markup: str | None
    attributes: AttributeSet = field(default_factory=AttributeSet)

    def to_dict(self) -> dict[str, Any]:
        """Structured-record representation written to the JSON sink."""
        return {
            "code": self.code,
            "name": self.name,
            "brand": self.brand,
            "category": self.category,
            "price": self.price,
            "image": self.image,
            "specLines": list(self.spec_lines),
            "rawMarkup": self.raw_markup,
        }


FingerprintMode = Literal["specs", "listing"]


@dataclass
class ScraperConfig:
    """Configuration for a shop scraper."""

    shop: ShopName
    base_url: str
    category_urls: list[CategoryUrl]
    rate_limit_delay: float = 1.0  # seconds between page loads
    timeout: int = 120  # seconds
    headless: bool = True
