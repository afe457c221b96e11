"""Unit tests for fingerprints and product code assignment."""

import pytest

from pcshop_scraper.identity.code_registry import (
    CODE_ALPHABET,
    CODE_LENGTH,
    CodeRegistry,
    build_fingerprint,
    code_from_digest,
    fingerprint_digest,
    fingerprint_for,
    listing_fingerprint,
    normalize_fingerprint_part,
    specs_fingerprint,
    to_base36,
)
from pcshop_scraper.models import AttributeSet, Fingerprint


def scripted_choice(symbols: str):
    """Choice function returning the given symbols in order."""
    remaining = iter(symbols)
    return lambda alphabet: next(remaining)


@pytest.mark.unit
class TestFingerprints:
    """Test fingerprint construction."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("  Laptop   A ", "laptop a"),
            ("ELECTRONICS", "electronics"),
            ("Ryzen 5", "ryzen 5"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize_fingerprint_part(self, value, expected):
        """Should lower-case, collapse whitespace and strip."""
        assert normalize_fingerprint_part(value) == expected

    def test_build_fingerprint_keeps_empty_fields(self):
        """Should keep positions of missing fields."""
        fingerprint = build_fingerprint(["Laptop A", "Electronics", "i5", "8GB", None, None])

        assert fingerprint == "laptop a||electronics||i5||8gb||||"

    def test_specs_fingerprint(self):
        """Should join name, category, cpu, ram, storage, psu and case."""
        attributes = AttributeSet(cpu="i5", ram="8GB", gpu="RTX 3050", resolution="FHD")

        fingerprint = specs_fingerprint("Laptop A", "Electronics", attributes)

        assert fingerprint == "laptop a||electronics||i5||8gb||||||"

    def test_listing_fingerprint(self):
        """Should join name, price, category and image."""
        fingerprint = listing_fingerprint(
            "Laptop A", "$ 499.00", "Used Laptop", "https://example.com/a.jpg"
        )

        assert fingerprint == "laptop a||$ 499.00||used laptop||https://example.com/a.jpg"

    def test_fingerprint_for_modes(self):
        """Should pick the identity fields by mode."""
        attributes = AttributeSet(cpu="i5")

        specs = fingerprint_for("specs", "PC", "Desktop", attributes, price="$1", image="x.jpg")
        listing = fingerprint_for("listing", "PC", "Desktop", attributes, price="$1", image="x.jpg")

        assert specs == "pc||desktop||i5||||||||"
        assert listing == "pc||$1||desktop||x.jpg"

    def test_fingerprint_changes_with_identity_field(self):
        """Should produce a different fingerprint when a spec changes."""
        first = specs_fingerprint("PC", "Desktop", AttributeSet(ram="8GB"))
        second = specs_fingerprint("PC", "Desktop", AttributeSet(ram="16GB"))

        assert first != second


@pytest.mark.unit
class TestCodeFromDigest:
    """Test digest to code conversion."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0, "0"), (35, "z"), (36, "10"), (255, "73"), (1295, "zz")],
    )
    def test_to_base36(self, value: int, expected: str):
        """Should render lower-case base 36."""
        assert to_base36(value) == expected

    def test_to_base36_negative_raises(self):
        """Should reject negative values."""
        with pytest.raises(ValueError, match="negative"):
            to_base36(-1)

    @pytest.mark.parametrize(
        "digest,expected",
        [("0", "00000000"), ("ff", "73000000"), ("FF", "73000000")],
    )
    def test_short_values_are_padded(self, digest: str, expected: str):
        """Should right-pad short codes with zeros."""
        assert code_from_digest(digest) == expected

    def test_sha256_digest_is_truncated(self):
        """Should truncate a full digest to the code length."""
        code = code_from_digest(fingerprint_digest("laptop a||electronics||i5||8gb||||"))

        assert len(code) == CODE_LENGTH
        assert all(symbol in CODE_ALPHABET for symbol in code)

    def test_invalid_digest_raises(self):
        """Should raise ValueError for non-hex input."""
        with pytest.raises(ValueError):
            code_from_digest("not-a-digest")


@pytest.mark.unit
class TestCodeRegistry:
    """Test run-scoped code assignment."""

    def test_same_fingerprint_same_code(self):
        """Should return the memoized code for a repeated fingerprint."""
        registry = CodeRegistry()
        fingerprint = Fingerprint("laptop a||electronics||i5||8gb||||")

        first = registry.code_for(fingerprint)
        second = registry.code_for(fingerprint)

        assert first == second
        assert len(registry) == 1
        assert first in registry

    def test_code_is_digest_derived(self):
        """Should use the digest-derived code when it is free."""
        fingerprint = Fingerprint("pc||desktop||i5||||||||")

        code = CodeRegistry().code_for(fingerprint)

        assert code == code_from_digest(fingerprint_digest(fingerprint))

    def test_stable_across_registries(self):
        """Should assign the same code in a new run regardless of order."""
        first_run = CodeRegistry()
        first_run.code_for(Fingerprint("a"))
        code_b = first_run.code_for(Fingerprint("b"))

        second_run = CodeRegistry()

        assert second_run.code_for(Fingerprint("b")) == code_b

    def test_collision_falls_back_to_random_code(self):
        """Should draw a random unused code when the derived code is taken."""
        fingerprint = Fingerprint("laptop a||electronics||i5||8gb||||")
        taken = code_from_digest(fingerprint_digest(fingerprint))
        registry = CodeRegistry(choice=scripted_choice("QQQQQQQQ"))
        registry.used_codes.add(taken)

        code = registry.code_for(fingerprint)

        assert code == "QQQQQQQQ"
        assert code != taken
        assert registry.fingerprint_codes[fingerprint] == "QQQQQQQQ"

    def test_random_code_skips_used_codes(self):
        """Should keep drawing until an unused code comes up."""
        registry = CodeRegistry(choice=scripted_choice("AAAAAAAABBBBBBBB"))
        registry.used_codes.add("AAAAAAAA")

        assert registry.random_code() == "BBBBBBBB"

    def test_invalid_digest_falls_back_to_random_code(self):
        """Should use a random code when the digest cannot be converted."""
        registry = CodeRegistry(choice=scripted_choice("Z1Z1Z1Z1"), digest=lambda text: "xyz")

        assert registry.code_for(Fingerprint("pc")) == "Z1Z1Z1Z1"

    def test_codes_are_unique(self):
        """Should never hand out the same code to two fingerprints."""
        registry = CodeRegistry(digest=lambda text: "ff")

        codes = {registry.code_for(Fingerprint(f"product {index}")) for index in range(20)}

        assert len(codes) == 20
        assert "73000000" in codes

    def test_codes_use_fixed_alphabet(self):
        """Should produce 8-character codes over A-Z and 0-9."""
        registry = CodeRegistry()

        for index in range(50):
            code = registry.code_for(Fingerprint(f"product {index}"))
            assert len(code) == CODE_LENGTH
            assert all(symbol in CODE_ALPHABET for symbol in code)

        for _ in range(10):
            code = registry.random_code()
            assert len(code) == CODE_LENGTH
            assert all(symbol in CODE_ALPHABET for symbol in code)
