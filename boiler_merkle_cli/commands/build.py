"""
CLI Build / Show Commands

Build a tree from blocks and print its root, or render the whole tree.

Usage:
    boiler-merkle build "block one" "block two" [--json] [--tree]
    boiler-merkle build --file blocks.txt
    boiler-merkle show "block one" "block two" [--short]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace

from boiler_merkle.crypto.hashing import to_hex
from boiler_merkle.merkle.display import render_tree
from boiler_merkle.merkle.merkle_tree import MerkleTree, build_merkle_tree
from boiler_merkle.schemas.errors import MerkleException
from boiler_merkle_cli.inputs import get_config, read_blocks, resolve_hasher, resolve_mode


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def tree_summary(tree: MerkleTree) -> dict:
    return {
        "root": to_hex(tree.root_digest),
        "leaf_count": tree.leaf_count,
        "padded_count": tree.padded_count,
        "depth": tree.depth,
        "mode": tree.mode.value,
        "algorithm": tree.hasher.algorithm,
    }


def _build(args: Namespace) -> MerkleTree | None:
    blocks = read_blocks(args)
    try:
        return build_merkle_tree(
            blocks,
            hasher=resolve_hasher(args),
            mode=resolve_mode(args),
        )
    except MerkleException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return None


def build_cmd(args: Namespace) -> int:
    """Handle build command."""
    tree = _build(args)
    if tree is None:
        return EXIT_RUNTIME_ERROR

    logger.info(f"Built tree over {tree.leaf_count} blocks")
    short = args.short or get_config(args).short_digests

    if args.json:
        summary = tree_summary(tree)
        if args.tree:
            summary["tree"] = render_tree(tree, short=short).splitlines()
        print(json.dumps(summary, indent=2))
    else:
        print(f"root: {to_hex(tree.root_digest)}")
        print(f"leaves: {tree.leaf_count} (padded to {tree.padded_count})")
        print(f"depth: {tree.depth}")
        if args.tree:
            print()
            print(render_tree(tree, short=short))

    return EXIT_SUCCESS


def show_cmd(args: Namespace) -> int:
    """Handle show command."""
    tree = _build(args)
    if tree is None:
        return EXIT_RUNTIME_ERROR

    short = args.short or get_config(args).short_digests
    print("Merkle Tree:")
    print(render_tree(tree, short=short))
    return EXIT_SUCCESS
