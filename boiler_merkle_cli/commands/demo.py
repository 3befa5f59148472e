"""
CLI Demo Command

Build the sample tree, print it, and walk through proving and verifying
one block, then show that editing a block changes the root.

Usage:
    boiler-merkle demo [--index N] [--short]
"""

from __future__ import annotations

import sys
from argparse import Namespace

from boiler_merkle.crypto.hashing import to_hex
from boiler_merkle.merkle.display import render_tree
from boiler_merkle.merkle.merkle_proofs import generate_merkle_proof, verify_merkle_proof
from boiler_merkle.merkle.merkle_tree import build_merkle_tree
from boiler_merkle_cli.inputs import get_config, resolve_hasher, resolve_mode


EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1

SAMPLE_BLOCKS = [
    "Soham is goated",
    "Adithya is kinda lame",
    "another example data block",
    "boom",
]


def demo_cmd(args: Namespace) -> int:
    """Handle demo command."""
    hasher = resolve_hasher(args)
    mode = resolve_mode(args)
    short = args.short or get_config(args).short_digests

    if args.index < 0 or args.index >= len(SAMPLE_BLOCKS):
        print(f"Error: --index must be between 0 and {len(SAMPLE_BLOCKS) - 1}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    tree = build_merkle_tree(SAMPLE_BLOCKS, hasher=hasher, mode=mode)

    print("Merkle Tree:")
    print(render_tree(tree, short=short))

    proof = generate_merkle_proof(tree, args.index)
    print(f"\nProof for block {args.index} ({SAMPLE_BLOCKS[args.index]!r}):")
    for level, step in enumerate(proof.steps):
        print(f"  level {level}: {step.side.value:<5} {to_hex(step.sibling)}")

    verified = verify_merkle_proof(
        tree.root_digest, hasher.hash_leaf(SAMPLE_BLOCKS[args.index]), proof,
        hasher=hasher, mode=mode,
    )
    print(f"verified: {str(verified).lower()}")

    tampered = list(SAMPLE_BLOCKS)
    tampered[2] = tampered[2].replace("a", "A", 1)
    tampered_tree = build_merkle_tree(tampered, hasher=hasher, mode=mode)
    print(f"\nroot:          {to_hex(tree.root_digest)}")
    print(f"tampered root: {to_hex(tampered_tree.root_digest)}")

    return EXIT_SUCCESS
