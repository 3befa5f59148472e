"""
Merkle Tree Construction
Deterministic, arena-backed Merkle tree built once from an ordered block list.

This module provides:
- TreeNode: immutable vertex stored in the tree's arena
- MerkleTree: owner of the arena with leaf lookup and root access
- build_merkle_tree: bottom-up construction with power-of-two padding
- compute_merkle_root: convenience wrapper returning only the root digest

Construction Rules (Hard Contracts):
1. Empty input is rejected with EmptyInputException
2. Padding: padding leaves are appended until the leaf count is a power of two.
   Padding leaves use Hasher.padding_digest() and are flagged is_padding;
   they never count as real leaves.
3. Leaves: leaf = hasher.hash_leaf(block), in input order
4. Levels: nodes are paired strictly left-to-right, parent = combine(left, right)
5. Single block: the root is the leaf itself

Arena Layout:
    [leaf 0 .. leaf P-1][level 1 nodes][level 2 nodes] ... [root]
Children and parents are referenced by arena index, never by object, so the
whole node set lives and dies with the MerkleTree instance.

Determinism Notes:
- No randomness or non-deterministic ordering
- This module never sorts leaves; it trusts input order
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Sequence

from boiler_merkle.crypto.hashing import DEFAULT_HASHER, Digest, Hasher
from boiler_merkle.schemas.errors import EmptyInputException, InvalidLeafException


logger = logging.getLogger(__name__)


class ProofMode(str, Enum):
    """
    How sibling digests are combined.

    POSITIONAL: combine(left, right) in true tree order. Proofs carry a
        side per level. This is the standard Merkle construction.
    SORTED: the smaller digest always goes first. Order-independent
        accumulator; swapping two sibling subtrees leaves the root unchanged,
        so inclusion proofs say nothing about position.
    """
    POSITIONAL = "positional"
    SORTED = "sorted"


@dataclass(frozen=True)
class TreeNode:
    """
    One vertex of a Merkle tree.

    Attributes:
        index: Position of this node in the owning tree's arena
        digest: Leaf digest or combination of the children's digests
        left: Arena index of the left child (None for leaves)
        right: Arena index of the right child (None for leaves)
        parent: Arena index of the parent (None only at the root)
        is_padding: True for leaves added to reach a power-of-two count
    """
    index: int
    digest: Digest
    left: int | None = None
    right: int | None = None
    parent: int | None = None
    is_padding: bool = False

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    @property
    def is_root(self) -> bool:
        return self.parent is None


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of levels between the leaves and the root after padding.

    This is also the length of every inclusion proof in the tree:
    ceil(log2(num_leaves)). A single leaf has depth 0.

    Args:
        num_leaves: Number of real leaves

    Returns:
        Tree depth (0 for empty or single-leaf trees)
    """
    if num_leaves <= 1:
        return 0
    return next_power_of_two(num_leaves).bit_length() - 1


class MerkleTree:
    """
    Immutable Merkle tree that owns all of its nodes.

    Instances are produced by build_merkle_tree(); nodes are frozen and
    stored in a tuple, so a built tree is safe to read from any number of
    threads without locking.

    Example:
        >>> tree = build_merkle_tree(["a", "b", "c"])
        >>> tree.leaf_count, tree.padded_count, tree.depth
        (3, 4, 2)
    """

    __slots__ = ("_nodes", "_leaf_count", "_hasher", "_mode")

    def __init__(
        self,
        nodes: Sequence[TreeNode],
        leaf_count: int,
        hasher: Hasher,
        mode: ProofMode,
    ) -> None:
        self._nodes: tuple[TreeNode, ...] = tuple(nodes)
        self._leaf_count = leaf_count
        self._hasher = hasher
        self._mode = mode

    # ------------------------------------------------------------------
    # Whole-tree properties
    # ------------------------------------------------------------------

    @property
    def root(self) -> TreeNode:
        return self._nodes[-1]

    @property
    def root_digest(self) -> Digest:
        return self._nodes[-1].digest

    @property
    def leaf_count(self) -> int:
        """Number of real (non-padding) leaves."""
        return self._leaf_count

    @property
    def padded_count(self) -> int:
        """Number of leaves including padding (always a power of two)."""
        # A perfect binary tree with P leaves has 2P - 1 nodes
        return (len(self._nodes) + 1) // 2

    @property
    def depth(self) -> int:
        return self.padded_count.bit_length() - 1

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    @property
    def mode(self) -> ProofMode:
        return self._mode

    @property
    def nodes(self) -> tuple[TreeNode, ...]:
        return self._nodes

    # ------------------------------------------------------------------
    # Node access
    # ------------------------------------------------------------------

    def node(self, index: int) -> TreeNode:
        """Node at an arena index."""
        if index < 0 or index >= len(self._nodes):
            raise IndexError(
                f"Node index {index} out of range for {len(self._nodes)} nodes"
            )
        return self._nodes[index]

    def leaf(self, index: int) -> TreeNode:
        """
        Leaf node for the block at the given input index.

        Raises:
            InvalidLeafException: If index does not name a real block
        """
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidLeafException(
                f"Leaf index must be an int, got {type(index).__name__}"
            )
        if index < 0 or index >= self._leaf_count:
            raise InvalidLeafException(
                f"Leaf index {index} out of range for {self._leaf_count} leaves",
                leaf_index=index,
                details={"leaf_count": self._leaf_count},
            )
        return self._nodes[index]

    def leaves(self, include_padding: bool = False) -> tuple[TreeNode, ...]:
        """Leaf nodes in input order."""
        end = self.padded_count if include_padding else self._leaf_count
        return self._nodes[:end]

    def levels(self) -> list[tuple[TreeNode, ...]]:
        """All levels bottom-up; the first is the padded leaf level, the last is (root,)."""
        result: list[tuple[TreeNode, ...]] = []
        start = 0
        width = self.padded_count
        while width >= 1:
            result.append(self._nodes[start:start + width])
            start += width
            width //= 2
        return result

    def children(self, node: TreeNode) -> tuple[TreeNode, TreeNode] | None:
        """(left, right) children of an internal node, None for leaves."""
        if node.left is None or node.right is None:
            return None
        return self._nodes[node.left], self._nodes[node.right]

    def parent_of(self, node: TreeNode) -> TreeNode | None:
        if node.parent is None:
            return None
        return self._nodes[node.parent]

    def contains(self, node: object) -> bool:
        """True if node is one of this tree's own nodes (identity, not equality)."""
        if not isinstance(node, TreeNode):
            return False
        return 0 <= node.index < len(self._nodes) and self._nodes[node.index] is node

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[TreeNode]:
        return iter(self._nodes)

    def __repr__(self) -> str:
        return (
            f"MerkleTree(leaf_count={self._leaf_count}, "
            f"padded_count={self.padded_count}, "
            f"root=0x{self.root_digest.hex()[:16]}..., mode={self._mode.value})"
        )


def build_merkle_tree(
    blocks: Sequence[bytes | str],
    hasher: Hasher | None = None,
    mode: ProofMode = ProofMode.POSITIONAL,
) -> MerkleTree:
    """
    Build a Merkle tree from an ordered sequence of data blocks.

    Algorithm:
    1. Reject empty input
    2. Hash every block into a leaf, then append padding leaves until
       the count is a power of two
    3. Pair nodes left-to-right, create a parent for each pair and
       link both children to it
    4. Repeat until a single root remains

    Example: [a, b, c] -> leaves [a, b, c, pad]
             -> [parent(a,b), parent(c,pad)] -> [root]

    Args:
        blocks: Ordered block contents (bytes or str). Order matters.
        hasher: Digest service (defaults to SHA-256)
        mode: Pair combination rule, see ProofMode

    Returns:
        The built MerkleTree

    Raises:
        EmptyInputException: If blocks is empty
    """
    if len(blocks) == 0:
        raise EmptyInputException()

    hasher = hasher or DEFAULT_HASHER
    mode = ProofMode(mode)
    if mode is ProofMode.SORTED:
        logger.warning(
            "Building tree in sorted-pair mode: proofs will not bind leaf positions"
        )
        pair = hasher.combine_sorted
    else:
        pair = hasher.combine

    leaf_count = len(blocks)
    padded_count = next_power_of_two(leaf_count)

    # Mutable arena columns, frozen into TreeNodes once every link is known
    digests: list[Digest] = [hasher.hash_leaf(block) for block in blocks]
    padding_digest = hasher.padding_digest()
    digests.extend(padding_digest for _ in range(padded_count - leaf_count))
    lefts: list[int | None] = [None] * padded_count
    rights: list[int | None] = [None] * padded_count
    parents: list[int | None] = [None] * padded_count

    current_level = list(range(padded_count))
    while len(current_level) > 1:
        next_level: list[int] = []
        for i in range(0, len(current_level), 2):
            left, right = current_level[i], current_level[i + 1]
            index = len(digests)
            digests.append(pair(digests[left], digests[right]))
            lefts.append(left)
            rights.append(right)
            parents.append(None)
            parents[left] = index
            parents[right] = index
            next_level.append(index)
        current_level = next_level

    nodes = [
        TreeNode(
            index=i,
            digest=digests[i],
            left=lefts[i],
            right=rights[i],
            parent=parents[i],
            is_padding=leaf_count <= i < padded_count,
        )
        for i in range(len(digests))
    ]

    tree = MerkleTree(nodes, leaf_count=leaf_count, hasher=hasher, mode=mode)
    logger.debug(
        f"Built Merkle tree: {leaf_count} blocks, {padded_count} leaves, "
        f"depth {tree.depth}, root 0x{tree.root_digest.hex()}"
    )
    return tree


def compute_merkle_root(
    blocks: Sequence[bytes | str],
    hasher: Hasher | None = None,
    mode: ProofMode = ProofMode.POSITIONAL,
) -> Digest:
    """Root digest of the tree built from blocks."""
    return build_merkle_tree(blocks, hasher=hasher, mode=mode).root_digest


__all__ = [
    "ProofMode",
    "TreeNode",
    "MerkleTree",
    "next_power_of_two",
    "compute_tree_depth",
    "build_merkle_tree",
    "compute_merkle_root",
]
