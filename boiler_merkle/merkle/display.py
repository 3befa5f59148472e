"""
Tree rendering for debugging.

Produces the indented ``|-- <digest>`` layout, four spaces per level,
root first and children depth-first left to right. Read-only; nothing in
the library depends on it.
"""
from __future__ import annotations

from boiler_merkle.crypto.hashing import to_hex
from boiler_merkle.merkle.merkle_tree import MerkleTree, TreeNode

INDENT = "    "


def format_digest(digest: bytes, short: bool = False) -> str:
    text = to_hex(digest)
    if short:
        return text[:12] + "..."
    return text


def render_tree(tree: MerkleTree, short: bool = False, mark_padding: bool = True) -> str:
    """
    Render a tree as indented text.

    Args:
        tree: Tree to render
        short: Truncate digests to their first bytes
        mark_padding: Suffix padding leaves with "(padding)"

    Returns:
        One line per node, joined with newlines
    """
    lines: list[str] = []

    # Explicit stack instead of recursion; push right first so left prints first
    stack: list[tuple[TreeNode, int]] = [(tree.root, 0)]
    while stack:
        node, level = stack.pop()
        line = f"{INDENT * level}|-- {format_digest(node.digest, short)}"
        if mark_padding and node.is_padding:
            line += " (padding)"
        lines.append(line)

        children = tree.children(node)
        if children is not None:
            left, right = children
            stack.append((right, level + 1))
            stack.append((left, level + 1))

    return "\n".join(lines)


def print_tree(tree: MerkleTree, short: bool = False) -> None:
    print(render_tree(tree, short=short))


__all__ = ["render_tree", "print_tree", "format_digest"]
