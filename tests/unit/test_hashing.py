"""
Hashing Unit Tests
Tests for boiler_merkle/crypto/hashing.py

Tests:
- sha256 stability
- leaf / node / padding domain separation
- Hasher algorithm selection
- to_hex/from_hex round trip
"""
import hashlib

import pytest

from boiler_merkle.crypto.hashing import (
    DEFAULT_HASHER,
    LEAF_PREFIX,
    NODE_PREFIX,
    PADDING_MARKER,
    PADDING_PREFIX,
    Hasher,
    combine,
    from_hex,
    hash_leaf,
    sha256,
    to_hex,
)
from boiler_merkle.schemas.errors import (
    ErrorCodes,
    HasherConfigurationException,
    MerkleException,
)


class TestSha256:
    """Tests for sha256() function."""

    def test_sha256_known_value(self):
        """sha256 matches hashlib for a known input."""
        assert sha256(b"hello") == hashlib.sha256(b"hello").digest()
        assert len(sha256(b"hello")) == 32

    def test_sha256_empty_bytes(self):
        assert sha256(b"") == hashlib.sha256(b"").digest()


class TestLeafHash:
    """Tests for Hasher.hash_leaf()."""

    def test_leaf_hash_uses_leaf_prefix(self):
        """Leaf digest is H(0x00 || block)."""
        expected = hashlib.sha256(LEAF_PREFIX + b"block").digest()
        assert DEFAULT_HASHER.hash_leaf(b"block") == expected

    def test_string_and_bytes_hash_equal(self):
        """Strings are UTF-8 encoded before hashing."""
        assert hash_leaf("Soham is goated") == hash_leaf(b"Soham is goated")

    def test_unicode_string_encoded_as_utf8(self):
        assert hash_leaf("café") == hash_leaf("café".encode("utf-8"))

    def test_bytearray_accepted(self):
        assert hash_leaf(bytearray(b"abc")) == hash_leaf(b"abc")

    @pytest.mark.parametrize("block", [3, None, 1.5, ["a"]])
    def test_other_types_rejected(self, block):
        """An int must not be read as a zero-filled buffer of that length."""
        with pytest.raises(TypeError, match="bytes or str"):
            hash_leaf(block)

    def test_deterministic(self):
        results = [hash_leaf("same") for _ in range(5)]
        assert all(r == results[0] for r in results)

    def test_different_blocks_differ(self):
        assert hash_leaf("a") != hash_leaf("b")

    def test_leaf_hash_differs_from_plain_sha256(self):
        """The leaf prefix separates leaf digests from raw hashes."""
        assert hash_leaf(b"a") != sha256(b"a")


class TestCombine:
    """Tests for Hasher.combine() and combine_sorted()."""

    def test_combine_uses_node_prefix(self):
        left = hash_leaf("left")
        right = hash_leaf("right")
        expected = hashlib.sha256(NODE_PREFIX + left + right).digest()

        assert combine(left, right) == expected

    def test_combine_order_matters(self):
        """combine(a, b) != combine(b, a)."""
        a = hash_leaf("a")
        b = hash_leaf("b")

        assert combine(a, b) != combine(b, a)

    def test_combine_sorted_is_commutative(self):
        a = hash_leaf("a")
        b = hash_leaf("b")

        assert DEFAULT_HASHER.combine_sorted(a, b) == DEFAULT_HASHER.combine_sorted(b, a)

    def test_combine_sorted_puts_smaller_first(self):
        a = hash_leaf("a")
        b = hash_leaf("b")
        low, high = sorted([a, b])

        assert DEFAULT_HASHER.combine_sorted(a, b) == combine(low, high)

    def test_node_digest_cannot_pose_as_leaf(self):
        """A leaf whose content is two concatenated digests does not match their parent."""
        a = hash_leaf("a")
        b = hash_leaf("b")

        assert hash_leaf(a + b) != combine(a, b)


class TestPaddingDigest:
    """Tests for Hasher.padding_digest()."""

    def test_padding_digest_value(self):
        expected = hashlib.sha256(PADDING_PREFIX + PADDING_MARKER).digest()
        assert DEFAULT_HASHER.padding_digest() == expected

    def test_padding_never_equals_leaf_of_marker(self):
        """Supplying the marker (or the classic "_" sentinel) as a block cannot mimic padding."""
        padding = DEFAULT_HASHER.padding_digest()

        assert hash_leaf(PADDING_MARKER) != padding
        assert hash_leaf(PADDING_PREFIX + PADDING_MARKER) != padding
        assert hash_leaf("_") != padding


class TestHasherConfiguration:
    """Tests for Hasher algorithm selection."""

    def test_default_algorithm(self):
        assert Hasher().algorithm == "sha256"
        assert Hasher().digest_size == 32

    def test_sha512(self):
        hasher = Hasher("sha512")

        assert hasher.digest_size == 64
        assert len(hasher.hash_leaf("a")) == 64
        assert hasher.hash_leaf("a") == hashlib.sha512(LEAF_PREFIX + b"a").digest()

    def test_algorithm_name_case_insensitive(self):
        assert Hasher("SHA256") == Hasher("sha256")

    def test_unknown_algorithm_raises(self):
        with pytest.raises(HasherConfigurationException) as exc_info:
            Hasher("definitely-not-a-hash")

        assert exc_info.value.code == ErrorCodes.HASHER_CONFIGURATION_ERROR
        assert exc_info.value.details["algorithm"] == "definitely-not-a-hash"
        assert isinstance(exc_info.value, MerkleException)

    def test_hashers_with_same_algorithm_are_equal(self):
        assert Hasher("sha256") == DEFAULT_HASHER
        assert hash(Hasher("sha256")) == hash(DEFAULT_HASHER)
        assert Hasher("sha512") != DEFAULT_HASHER

    def test_algorithms_produce_different_digests(self):
        assert Hasher("sha256").hash_leaf("a") != Hasher("sha512").hash_leaf("a")[:32]


class TestHexConversion:
    """Tests for to_hex() and from_hex()."""

    def test_to_hex_prefix(self):
        assert to_hex(bytes.fromhex("deadbeef")) == "0xdeadbeef"

    def test_round_trip(self):
        digest = hash_leaf("round trip")
        assert from_hex(to_hex(digest)) == digest

    def test_from_hex_requires_prefix(self):
        with pytest.raises(ValueError, match="0x"):
            from_hex("deadbeef")

    def test_from_hex_rejects_odd_length(self):
        with pytest.raises(ValueError, match="even length"):
            from_hex("0xabc")

    def test_from_hex_rejects_invalid_chars(self):
        with pytest.raises(ValueError, match="Invalid hex"):
            from_hex("0xzz")
