"""Fingerprints and 8-character product codes.

A code is derived from the SHA-256 digest of a product fingerprint, so the
same product gets the same code on every page and in every run. Within a run
the registry also guarantees that no two fingerprints share a code; when the
digest-derived code is taken, a random unused code is drawn instead. The
random fallback gives uniqueness only, not a security property.
"""

import hashlib
import re
import secrets
import string
from typing import Callable, Optional, Sequence

from loguru import logger

from pcshop_scraper.models import (
    AttributeSet,
    Fingerprint,
    FingerprintMode,
    ProductCode,
)

CODE_LENGTH = 8
CODE_ALPHABET = string.ascii_uppercase + string.digits
FINGERPRINT_SEPARATOR = "||"

_BASE36_DIGITS = string.digits + string.ascii_lowercase


def normalize_fingerprint_part(value: Optional[str]) -> str:
    """Lower-case, collapse whitespace and strip. None becomes ""."""
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value).lower()).strip()


def build_fingerprint(parts: Sequence[Optional[str]]) -> Fingerprint:
    """Join normalized identity fields in the given order."""
    return Fingerprint(
        FINGERPRINT_SEPARATOR.join(normalize_fingerprint_part(part) for part in parts)
    )


def specs_fingerprint(
    name: str, category: Optional[str], attributes: AttributeSet
) -> Fingerprint:
    """Fingerprint over name, category, cpu, ram, storage, psu and case."""
    return build_fingerprint(
        [
            name,
            category,
            attributes.get("cpu"),
            attributes.get("ram"),
            attributes.get("storage"),
            attributes.get("psu"),
            attributes.get("case"),
        ]
    )


def listing_fingerprint(
    name: str, price: Optional[str], category: Optional[str], image: Optional[str]
) -> Fingerprint:
    """Fingerprint over name, price, category and image URL."""
    return build_fingerprint([name, price, category, image])


def to_base36(value: int) -> str:
    """Lower-case base-36 representation of a non-negative integer."""
    if value < 0:
        raise ValueError(f"Cannot convert negative value to base 36: {value}")
    if value == 0:
        return "0"

    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def code_from_digest(hex_digest: str) -> ProductCode:
    """Turn a hex digest into an 8-character upper-case base-36 code.

    Raises:
        ValueError: If the digest is not valid hexadecimal
    """
    base36 = to_base36(int(hex_digest, 16)).upper()
    base36 = re.sub(r"[^A-Z0-9]", "", base36)
    return ProductCode((base36 + "0" * CODE_LENGTH)[:CODE_LENGTH])


def fingerprint_digest(fingerprint: str) -> str:
    return hashlib.sha256(fingerprint.encode("utf-8")).hexdigest()


class CodeRegistry:
    """Run-scoped registry of used codes and fingerprint → code assignments.

    One registry is created per run by the orchestrator and passed to the
    product builder; it is never shared between runs.
    """

    def __init__(
        self,
        choice: Callable[[str], str] = secrets.choice,
        digest: Callable[[str], str] = fingerprint_digest,
    ):
        """Initialize an empty registry.

        Args:
            choice: Picks one symbol from the alphabet for random codes
            digest: Hex digest function applied to fingerprints
        """
        self._choice = choice
        self._digest = digest
        self.used_codes: set[ProductCode] = set()
        self.fingerprint_codes: dict[Fingerprint, ProductCode] = {}

    def __contains__(self, code: str) -> bool:
        return code in self.used_codes

    def __len__(self) -> int:
        return len(self.used_codes)

    def random_code(self) -> ProductCode:
        """Draw random codes until an unused one is found."""
        while True:
            code = ProductCode(
                "".join(self._choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
            )
            if code not in self.used_codes:
                return code

    def _candidate_code(self, fingerprint: Fingerprint) -> ProductCode:
        try:
            candidate = code_from_digest(self._digest(fingerprint))
        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to derive code from digest for {fingerprint!r}: {e}")
            return self.random_code()

        if candidate in self.used_codes:
            logger.debug(f"Code {candidate} already used, drawing a random code")
            return self.random_code()

        return candidate

    def code_for(self, fingerprint: Fingerprint) -> ProductCode:
        """Return the code for a fingerprint, assigning one on first sight.

        Args:
            fingerprint: Normalized identity of a product

        Returns:
            8-character code from CODE_ALPHABET, unique within this registry
        """
        if fingerprint in self.fingerprint_codes:
            return self.fingerprint_codes[fingerprint]

        code = self._candidate_code(fingerprint)
        self.used_codes.add(code)
        self.fingerprint_codes[fingerprint] = code
        return code


def fingerprint_for(
    mode: FingerprintMode,
    name: str,
    category: Optional[str],
    attributes: AttributeSet,
    price: Optional[str] = None,
    image: Optional[str] = None,
) -> Fingerprint:
    """Fingerprint of a product for the configured mode."""
    if mode == "listing":
        return listing_fingerprint(name, price, category, image)
    return specs_fingerprint(name, category, attributes)
