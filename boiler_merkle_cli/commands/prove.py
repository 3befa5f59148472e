"""
CLI Prove Command

Build a tree from blocks and emit the inclusion proof for one block as JSON.

Usage:
    boiler-merkle prove "a" "b" "c" --index 1 [--out proof.json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from boiler_merkle.merkle.merkle_proofs import generate_merkle_proof
from boiler_merkle.merkle.merkle_tree import build_merkle_tree
from boiler_merkle.schemas.errors import MerkleException
from boiler_merkle_cli.inputs import read_blocks, resolve_hasher, resolve_mode


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def prove_cmd(args: Namespace) -> int:
    """Handle prove command."""
    blocks = read_blocks(args)
    try:
        tree = build_merkle_tree(
            blocks,
            hasher=resolve_hasher(args),
            mode=resolve_mode(args),
        )
        proof = generate_merkle_proof(tree, args.index)
    except MerkleException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    payload = json.dumps(proof.to_dict(), indent=2)

    if args.out:
        out_path = Path(args.out)
        out_path.write_text(payload + "\n", encoding="utf-8")
        logger.info(f"Wrote proof for leaf {args.index} to {out_path}")
        print(f"proof written: {out_path}")
    else:
        print(payload)

    return EXIT_SUCCESS
