"""
boiler-merkle

Merkle tree construction with inclusion proof generation and verification.
"""

from boiler_merkle.crypto.hashing import Hasher, hash_leaf, combine
from boiler_merkle.merkle import (
    MerkleProof,
    MerkleTree,
    ProofMode,
    TreeNode,
    build_merkle_tree,
    generate_merkle_proof,
    verify_merkle_proof,
)
from boiler_merkle.schemas.errors import (
    EmptyInputException,
    InvalidLeafException,
    MerkleException,
)

__version__ = "0.1.0"

__all__ = [
    "Hasher",
    "hash_leaf",
    "combine",
    "MerkleTree",
    "TreeNode",
    "ProofMode",
    "MerkleProof",
    "build_merkle_tree",
    "generate_merkle_proof",
    "verify_merkle_proof",
    "MerkleException",
    "EmptyInputException",
    "InvalidLeafException",
]
