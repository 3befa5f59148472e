"""
Cryptographic utilities.

Provides the pluggable Hasher and hex helpers used by the Merkle modules.
"""
from .hashing import (
    DEFAULT_HASHER,
    Digest,
    Hasher,
    combine,
    from_hex,
    hash_leaf,
    sha256,
    to_hex,
)

__all__ = [
    "Digest",
    "Hasher",
    "DEFAULT_HASHER",
    "sha256",
    "hash_leaf",
    "combine",
    "to_hex",
    "from_hex",
]
