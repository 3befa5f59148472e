"""
Merkle Tree and Inclusion Proofs
Arena-backed tree construction + proof generation/verification.

This module provides:
- MerkleTree / TreeNode: immutable tree built once from ordered blocks
- build_merkle_tree: construction with power-of-two padding
- MerkleProof: inclusion proof with per-level sibling sides
- generate_merkle_proof / verify_merkle_proof: the proof engine
- MerkleProver / MerkleVerifier: convenience wrappers
- render_tree: debug rendering

Usage:
    from boiler_merkle.merkle import build_merkle_tree, generate_merkle_proof, verify_merkle_proof
    from boiler_merkle.crypto import hash_leaf

    tree = build_merkle_tree([b"a", b"b", b"c"])
    proof = generate_merkle_proof(tree, 2)
    assert verify_merkle_proof(tree.root_digest, hash_leaf(b"c"), proof)
"""
from .merkle_tree import (
    MerkleTree,
    ProofMode,
    TreeNode,
    build_merkle_tree,
    compute_merkle_root,
    compute_tree_depth,
    next_power_of_two,
)

from .merkle_proofs import (
    MerkleProof,
    MerkleProver,
    MerkleVerifier,
    ProofStep,
    Side,
    check_proof_shape,
    path_matches_index,
    generate_all_proofs,
    generate_merkle_proof,
    verify_block_inclusion,
    verify_merkle_proof,
    verify_proof,
)

from .display import render_tree


__all__ = [
    # Core types
    "MerkleTree",
    "TreeNode",
    "ProofMode",
    "MerkleProof",
    "ProofStep",
    "Side",
    # Construction
    "build_merkle_tree",
    "compute_merkle_root",
    "compute_tree_depth",
    "next_power_of_two",
    # Proofs
    "generate_merkle_proof",
    "generate_all_proofs",
    "verify_merkle_proof",
    "verify_proof",
    "verify_block_inclusion",
    "check_proof_shape",
    "path_matches_index",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
    # Debug
    "render_tree",
]
