"""
Merkle Inclusion Proofs
Proof generation by walking parent links, and proof verification by
recomputing the root from a leaf digest.

This module provides:
- Side / ProofStep: one sibling digest plus the side it sits on
- MerkleProof: a self-contained inclusion proof with JSON-friendly (de)serialization
- generate_merkle_proof: sibling path from a leaf up to (not including) the root
- verify_merkle_proof: pure predicate, never raises
- check_proof_shape: structural validation before verification
- MerkleProver / MerkleVerifier: convenience wrappers working from raw blocks

Proof Rules:
1. Steps are ordered bottom-up: the leaf's immediate sibling first,
   the root's other child last
2. A proof has exactly log2(padded leaf count) steps
3. Positional mode: a LEFT sibling folds as combine(sibling, current),
   a RIGHT sibling as combine(current, sibling)
4. Sorted mode: the smaller digest folds first and sides are ignored
5. Padding leaves are never provable
6. The verifier picks the mode (positional unless told otherwise); a proof
   recording a different mode is rejected, and a positional proof's sides
   must spell out its leaf index
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence, Union

from boiler_merkle.crypto.hashing import (
    DEFAULT_ALGORITHM,
    DEFAULT_HASHER,
    Digest,
    Hasher,
    from_hex,
    to_hex,
)
from boiler_merkle.merkle.merkle_tree import (
    MerkleTree,
    ProofMode,
    TreeNode,
    build_merkle_tree,
    compute_tree_depth,
)
from boiler_merkle.schemas.errors import (
    HasherConfigurationException,
    InvalidLeafException,
    ProofFormatException,
)


logger = logging.getLogger(__name__)


class Side(str, Enum):
    """Side of the sibling relative to the node on the proof path."""
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class ProofStep:
    """One level of an inclusion proof."""
    sibling: Digest
    side: Side


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle proof for a single leaf in a Merkle tree.

    The proof allows verification that a leaf is included in a tree
    with a known root, without revealing the entire tree.

    Attributes:
        leaf_index: The 0-based input index of the proven block
        leaf_digest: The leaf digest being proven
        root: The root digest this proof was generated against
        steps: Sibling digests with their sides, bottom-up
        mode: Combination rule of the tree that produced the proof
        algorithm: Hash algorithm of the tree that produced the proof
    """
    leaf_index: int
    leaf_digest: Digest
    root: Digest
    steps: tuple[ProofStep, ...] = ()
    mode: ProofMode = ProofMode.POSITIONAL
    algorithm: str = field(default=DEFAULT_ALGORITHM)

    def __post_init__(self) -> None:
        """Validate proof structure."""
        if self.leaf_index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.leaf_index}")
        # Normalize list input so the proof stays hashable and immutable
        if not isinstance(self.steps, tuple):
            object.__setattr__(self, "steps", tuple(self.steps))
        if not isinstance(self.mode, ProofMode):
            object.__setattr__(self, "mode", ProofMode(self.mode))

    @property
    def siblings(self) -> list[Digest]:
        """Plain ordered sibling digest sequence."""
        return [step.sibling for step in self.steps]

    @property
    def path(self) -> list[Side]:
        return [step.side for step in self.steps]

    def __len__(self) -> int:
        return len(self.steps)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with 0x-prefixed hex digests."""
        return {
            "leaf_index": self.leaf_index,
            "leaf_digest": to_hex(self.leaf_digest),
            "root": to_hex(self.root),
            "mode": self.mode.value,
            "algorithm": self.algorithm,
            "steps": [
                {"sibling": to_hex(step.sibling), "side": step.side.value}
                for step in self.steps
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MerkleProof":
        """
        Decode a proof produced by to_dict().

        Raises:
            ProofFormatException: If a field is missing or malformed
        """
        if not isinstance(data, dict):
            raise ProofFormatException(
                f"Proof must be a JSON object, got {type(data).__name__}"
            )

        try:
            steps = tuple(
                ProofStep(sibling=from_hex(step["sibling"]), side=Side(step["side"]))
                for step in data.get("steps", [])
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ProofFormatException(f"Invalid proof step: {e}", field_path="steps") from e

        for key in ("leaf_index", "leaf_digest", "root"):
            if key not in data:
                raise ProofFormatException(f"Missing proof field: {key}", field_path=key)

        try:
            return cls(
                leaf_index=int(data["leaf_index"]),
                leaf_digest=from_hex(data["leaf_digest"]),
                root=from_hex(data["root"]),
                steps=steps,
                mode=ProofMode(data.get("mode", ProofMode.POSITIONAL.value)),
                algorithm=str(data.get("algorithm", DEFAULT_ALGORITHM)),
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise ProofFormatException(f"Invalid proof: {e}") from e


ProofInput = Union[MerkleProof, Sequence[Union[ProofStep, Digest]]]


def _resolve_leaf(tree: MerkleTree, leaf: TreeNode | int | None) -> TreeNode:
    if leaf is None:
        raise InvalidLeafException("Cannot generate proof for a null leaf")

    if isinstance(leaf, TreeNode):
        if not tree.contains(leaf):
            raise InvalidLeafException(
                "Node does not belong to this tree",
                leaf_index=leaf.index,
            )
        if not leaf.is_leaf:
            raise InvalidLeafException(
                f"Node {leaf.index} is an internal node, not a leaf",
                leaf_index=leaf.index,
            )
        if leaf.is_padding:
            raise InvalidLeafException(
                f"Node {leaf.index} is a padding leaf",
                leaf_index=leaf.index,
            )
        return leaf

    return tree.leaf(leaf)


def generate_merkle_proof(tree: MerkleTree, leaf: TreeNode | int) -> MerkleProof:
    """
    Generate the inclusion proof for a real leaf.

    Algorithm:
    1. Start at the target leaf
    2. While the current node has a parent:
       - Record the other child's digest and its side
       - Move to the parent
    3. Stop at the root

    Args:
        tree: Tree produced by build_merkle_tree
        leaf: Input index of the block, or the leaf TreeNode itself

    Returns:
        MerkleProof with one step per level

    Raises:
        InvalidLeafException: If leaf is None, out of range, a padding leaf,
            an internal node, or a node of a different tree
    """
    node = _resolve_leaf(tree, leaf)

    steps: list[ProofStep] = []
    current = node
    while current.parent is not None:
        parent = tree.node(current.parent)
        if parent.left == current.index:
            steps.append(ProofStep(tree.node(parent.right).digest, Side.RIGHT))
        else:
            steps.append(ProofStep(tree.node(parent.left).digest, Side.LEFT))
        current = parent

    logger.debug(f"Generated proof for leaf {node.index}: {len(steps)} steps")

    return MerkleProof(
        leaf_index=node.index,
        leaf_digest=node.digest,
        root=tree.root_digest,
        steps=tuple(steps),
        mode=tree.mode,
        algorithm=tree.hasher.algorithm,
    )


def generate_all_proofs(tree: MerkleTree) -> list[MerkleProof]:
    """Proofs for every real leaf, in input order."""
    return [generate_merkle_proof(tree, i) for i in range(tree.leaf_count)]


def verify_merkle_proof(
    root_digest: Digest,
    leaf_digest: Digest,
    proof: ProofInput,
    hasher: Hasher | None = None,
    mode: ProofMode | None = None,
) -> bool:
    """
    Verify that leaf_digest is included under root_digest.

    Recomputes the root by folding each sibling into the running digest,
    then compares it with root_digest. Malformed input of any kind
    (wrong types, missing sides in positional mode, wrong length) simply
    yields False.

    The mode is the verifier's choice, never the proof's: a MerkleProof
    recording another mode fails, and in positional mode its sides must
    match its leaf index.

    Args:
        root_digest: Trusted root digest
        leaf_digest: Digest of the leaf being proven
        proof: A MerkleProof, or a sequence of ProofStep / bare digests
        hasher: Digest service (defaults to SHA-256)
        mode: Combination rule the root was built with (default POSITIONAL)

    Returns:
        True if the recomputed root equals root_digest
    """
    if not isinstance(root_digest, (bytes, bytearray)):
        return False
    if not isinstance(leaf_digest, (bytes, bytearray)):
        return False

    if mode is None:
        mode = ProofMode.POSITIONAL
    sorted_mode = mode == ProofMode.SORTED

    if isinstance(proof, MerkleProof):
        if proof.mode != mode:
            logger.debug(
                f"Rejecting proof recorded in {proof.mode.value!r} mode "
                f"while verifying in {getattr(mode, 'value', mode)!r} mode"
            )
            return False
        if not sorted_mode and not path_matches_index(proof):
            return False
        steps: Sequence[Any] = proof.steps
    elif isinstance(proof, (list, tuple)):
        steps = proof
    else:
        return False

    hasher = hasher or DEFAULT_HASHER

    current = bytes(leaf_digest)
    for step in steps:
        if isinstance(step, ProofStep):
            sibling, side = step.sibling, step.side
        else:
            sibling, side = step, None

        if not isinstance(sibling, (bytes, bytearray)):
            return False
        sibling = bytes(sibling)

        if sorted_mode:
            current = hasher.combine_sorted(current, sibling)
        elif side == Side.LEFT:
            current = hasher.combine(sibling, current)
        elif side == Side.RIGHT:
            current = hasher.combine(current, sibling)
        else:
            # Positional folding needs a side for every step
            return False

    verified = current == bytes(root_digest)
    logger.debug(f"Proof verification ({len(steps)} steps): {'ok' if verified else 'mismatch'}")
    return verified


def verify_proof(proof: MerkleProof, hasher: Hasher | None = None) -> bool:
    """
    Verify a self-contained proof against its own embedded root.

    The hasher defaults to the proof's recorded algorithm; an algorithm
    that is unavailable locally makes the proof unverifiable (False).
    """
    if not isinstance(proof, MerkleProof):
        return False
    if hasher is None:
        try:
            hasher = Hasher(proof.algorithm)
        except HasherConfigurationException:
            logger.warning(f"Cannot verify proof: unsupported algorithm {proof.algorithm!r}")
            return False
    return verify_merkle_proof(
        proof.root, proof.leaf_digest, proof, hasher=hasher, mode=proof.mode
    )


def verify_block_inclusion(
    root_digest: Digest,
    block: bytes | str,
    proof: ProofInput,
    hasher: Hasher | None = None,
    mode: ProofMode | None = None,
) -> bool:
    """Hash a raw block and verify its inclusion under root_digest."""
    if not isinstance(block, (bytes, bytearray, str)):
        return False
    hasher = hasher or DEFAULT_HASHER
    return verify_merkle_proof(
        root_digest, hasher.hash_leaf(block), proof, hasher=hasher, mode=mode
    )


def path_matches_index(proof: MerkleProof) -> bool:
    """
    True if the step sides spell out the proof's leaf index.

    Read bottom-up, each bit of the index says whether the node is a right
    child (1) or a left child (0). An index needing more bits than there
    are steps cannot sit in a tree of that depth.
    """
    index = proof.leaf_index
    for step in proof.steps:
        # An even index is a left child, so its sibling is on the right
        expected = Side.RIGHT if index % 2 == 0 else Side.LEFT
        if step.side != expected:
            return False
        index //= 2
    return index == 0


def check_proof_shape(
    proof: MerkleProof,
    expected_leaf_count: int,
    mode: ProofMode = ProofMode.POSITIONAL,
) -> bool:
    """
    Structural check separating malformed proofs from wrong ones.

    A well-formed proof for a tree of expected_leaf_count real blocks was
    recorded in the verifier's mode, has a leaf index inside that range,
    exactly compute_tree_depth() steps, and, in positional mode, sides
    matching the bits of its leaf index.
    """
    if proof.mode != mode:
        return False
    if expected_leaf_count < 1:
        return False
    if proof.leaf_index >= expected_leaf_count:
        return False
    if len(proof.steps) != compute_tree_depth(expected_leaf_count):
        return False
    if mode == ProofMode.POSITIONAL:
        return path_matches_index(proof)
    return True


class MerkleProver:
    """
    Convenience class for generating Merkle proofs from raw blocks.

    Example:
        >>> proof = MerkleProver.prove(["a", "b", "c"], index=1)
        >>> len(proof)
        2
    """

    @staticmethod
    def prove(
        blocks: Sequence[bytes | str],
        index: int,
        hasher: Hasher | None = None,
        mode: ProofMode = ProofMode.POSITIONAL,
    ) -> MerkleProof:
        """
        Build a tree from blocks and prove the block at index.

        Raises:
            EmptyInputException: If blocks is empty
            InvalidLeafException: If index is out of range
        """
        tree = build_merkle_tree(blocks, hasher=hasher, mode=mode)
        return generate_merkle_proof(tree, index)

    @staticmethod
    def prove_all(
        blocks: Sequence[bytes | str],
        hasher: Hasher | None = None,
        mode: ProofMode = ProofMode.POSITIONAL,
    ) -> list[MerkleProof]:
        tree = build_merkle_tree(blocks, hasher=hasher, mode=mode)
        return generate_all_proofs(tree)

    @staticmethod
    def compute_root(
        blocks: Sequence[bytes | str],
        hasher: Hasher | None = None,
        mode: ProofMode = ProofMode.POSITIONAL,
    ) -> Digest:
        return build_merkle_tree(blocks, hasher=hasher, mode=mode).root_digest


class MerkleVerifier:
    """
    Convenience class for verifying Merkle proofs.

    Example:
        >>> proof = MerkleProver.prove(["a", "b"], index=0)
        >>> MerkleVerifier.verify(proof)
        True
    """

    @staticmethod
    def verify(proof: MerkleProof, hasher: Hasher | None = None) -> bool:
        return verify_proof(proof, hasher=hasher)

    @staticmethod
    def verify_block(
        block: bytes | str,
        proof: MerkleProof,
        root: Digest,
        hasher: Hasher | None = None,
        mode: ProofMode = ProofMode.POSITIONAL,
    ) -> bool:
        """
        Verify a raw block against a trusted root.

        The root and mode are supplied by the caller; the root and mode
        embedded in the proof are not trusted.
        """
        return verify_block_inclusion(root, block, proof, hasher=hasher, mode=mode)

    @staticmethod
    def verify_leaf_in_root(
        leaf_digest: Digest,
        siblings: Sequence[ProofStep | Digest],
        root: Digest,
        hasher: Hasher | None = None,
        mode: ProofMode = ProofMode.POSITIONAL,
    ) -> bool:
        return verify_merkle_proof(root, leaf_digest, list(siblings), hasher=hasher, mode=mode)


__all__ = [
    "Side",
    "ProofStep",
    "MerkleProof",
    "generate_merkle_proof",
    "generate_all_proofs",
    "verify_merkle_proof",
    "verify_proof",
    "verify_block_inclusion",
    "path_matches_index",
    "check_proof_shape",
    "MerkleProver",
    "MerkleVerifier",
]
