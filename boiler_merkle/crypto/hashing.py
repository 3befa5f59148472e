"""
Hashing Utilities
Leaf, node and padding digests for Merkle commitments.

This module provides:
- SHA-256 hashing for raw bytes
- Hasher: a stateless, injectable digest service
- Hex encoding/decoding with 0x prefix

Domain Separation Rules:
1. Leaf digest:    H(0x00 || block)
2. Node digest:    H(0x01 || left || right)
3. Padding digest: H(0x02 || PADDING_MARKER)

The one-byte type tag keeps the three preimage spaces disjoint, so no
caller-supplied block can hash to the padding digest or to an internal node.

Security/Determinism Notes:
- Always hash raw bytes exactly as given; strings are UTF-8 encoded
- The hasher holds no mutable state, so one instance may be shared freely
"""
from __future__ import annotations

import hashlib

from boiler_merkle.schemas.errors import HasherConfigurationException


# A digest is an opaque, comparable byte string.
Digest = bytes

LEAF_PREFIX: bytes = b"\x00"
NODE_PREFIX: bytes = b"\x01"
PADDING_PREFIX: bytes = b"\x02"
PADDING_MARKER: bytes = b"boiler-merkle/padding"

DEFAULT_ALGORITHM = "sha256"


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def to_bytes(block: bytes | str) -> bytes:
    """
    Encode a block for hashing. Strings are UTF-8 encoded.

    Raises:
        TypeError: If block is not bytes, bytearray or str
    """
    if isinstance(block, str):
        return block.encode("utf-8")
    if isinstance(block, (bytes, bytearray)):
        return bytes(block)
    raise TypeError(f"Block must be bytes or str, got {type(block).__name__}")


class Hasher:
    """
    Stateless digest service used by the tree builder and the verifier.

    Wraps any fixed-output algorithm known to ``hashlib``. Swapping the
    algorithm changes every digest but none of the tree logic.

    Example:
        >>> hasher = Hasher()
        >>> len(hasher.hash_leaf("a"))
        32
    """

    __slots__ = ("_algorithm",)

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM) -> None:
        name = algorithm.lower()
        if name not in hashlib.algorithms_available:
            raise HasherConfigurationException(
                f"Unsupported hash algorithm: {algorithm}",
                algorithm=algorithm,
            )
        # Variable-length digests (shake_*) need an explicit length
        if hashlib.new(name).digest_size == 0:
            raise HasherConfigurationException(
                f"Hash algorithm {algorithm} has no fixed digest size",
                algorithm=algorithm,
            )
        self._algorithm = name

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def digest_size(self) -> int:
        return hashlib.new(self._algorithm).digest_size

    def _digest(self, *parts: bytes) -> Digest:
        h = hashlib.new(self._algorithm)
        for part in parts:
            h.update(part)
        return h.digest()

    def hash_leaf(self, block: bytes | str) -> Digest:
        """
        Digest of a single data block.

        Args:
            block: Raw block bytes or a string (UTF-8 encoded)

        Returns:
            Leaf digest H(0x00 || block)
        """
        return self._digest(LEAF_PREFIX, to_bytes(block))

    def combine(self, left: Digest, right: Digest) -> Digest:
        """
        Combine two child digests into their parent digest.

        Order-sensitive: combine(a, b) != combine(b, a) for a != b.

        Args:
            left: Left child digest
            right: Right child digest

        Returns:
            Parent digest H(0x01 || left || right)
        """
        return self._digest(NODE_PREFIX, left, right)

    def combine_sorted(self, a: Digest, b: Digest) -> Digest:
        """
        Combine two digests with the lexicographically smaller one first.

        Commutative, so the result carries no left/right information.
        """
        if a <= b:
            return self.combine(a, b)
        return self.combine(b, a)

    def padding_digest(self) -> Digest:
        """Digest used for every padding leaf."""
        return self._digest(PADDING_PREFIX, PADDING_MARKER)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hasher):
            return NotImplemented
        return self._algorithm == other._algorithm

    def __hash__(self) -> int:
        return hash(self._algorithm)

    def __repr__(self) -> str:
        return f"Hasher(algorithm={self._algorithm!r})"


DEFAULT_HASHER = Hasher()


def hash_leaf(block: bytes | str) -> Digest:
    """Leaf digest using the default SHA-256 hasher."""
    return DEFAULT_HASHER.hash_leaf(block)


def combine(left: Digest, right: Digest) -> Digest:
    """Parent digest using the default SHA-256 hasher."""
    return DEFAULT_HASHER.combine(left, right)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Args:
        hex_string: Hex string with 0x prefix

    Returns:
        Decoded bytes

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "Digest",
    "DEFAULT_ALGORITHM",
    "DEFAULT_HASHER",
    "LEAF_PREFIX",
    "NODE_PREFIX",
    "PADDING_PREFIX",
    "PADDING_MARKER",
    "Hasher",
    "sha256",
    "to_bytes",
    "hash_leaf",
    "combine",
    "to_hex",
    "from_hex",
]
