"""
CLI Verify Command

Verify an inclusion proof against a trusted root without the rest of the data.

Usage:
    boiler-merkle verify --root 0x... --proof proof.json [--block TEXT | --leaf 0x...]
                         [--expected-leaves N] [--json]

Without --block or --leaf, the leaf digest recorded in the proof is used.
The root and mode recorded in the proof are never trusted: --root is
required, and the mode comes from --mode or the configuration.
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path

from boiler_merkle.crypto.hashing import from_hex, to_hex
from boiler_merkle.merkle.merkle_proofs import (
    MerkleProof,
    check_proof_shape,
    verify_merkle_proof,
)
from boiler_merkle.schemas.errors import MerkleException, ProofFormatException
from boiler_merkle_cli.inputs import resolve_hasher, resolve_mode


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of proof verification for CLI output."""
    root: str = ""
    leaf_digest: str = ""
    leaf_index: int = 0
    steps: int = 0
    mode: str = ""
    shape_ok: bool | None = None
    verified: bool = False
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = asdict(self)
        if self.shape_ok is None:
            del d["shape_ok"]
        if not d["errors"]:
            del d["errors"]
        return d


def load_proof(path: Path) -> MerkleProof:
    """Read a proof written by the prove command."""
    if not path.exists():
        raise FileNotFoundError(f"Proof file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ProofFormatException(f"Proof file is not valid JSON: {e}") from e
    return MerkleProof.from_dict(data)


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"root: {summary.root}")
    print(f"leaf: {summary.leaf_digest} (index {summary.leaf_index})")
    print(f"steps: {summary.steps}")
    print(f"mode: {summary.mode}")
    if summary.shape_ok is not None:
        print(f"shape_ok: {str(summary.shape_ok).lower()}")
    print(f"verified: {str(summary.verified).lower()}")
    for err in summary.errors:
        print(f"  ✗ {err}")


def verify_cmd(args: Namespace) -> int:
    """Handle verify command."""
    try:
        proof = load_proof(Path(args.proof))
        root = from_hex(args.root)
        hasher = resolve_hasher(args, fallback=proof.algorithm)
        mode = resolve_mode(args)
        if args.block is not None:
            leaf_digest = hasher.hash_leaf(args.block)
        elif args.leaf:
            leaf_digest = from_hex(args.leaf)
        else:
            leaf_digest = proof.leaf_digest
    except (MerkleException, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary = VerifySummary(
        root=to_hex(root),
        leaf_digest=to_hex(leaf_digest),
        leaf_index=proof.leaf_index,
        steps=len(proof),
        mode=mode.value,
    )

    # The mode comes from --mode or config, never from the proof file
    mode_ok = proof.mode == mode
    if not mode_ok:
        summary.errors.append(
            f"Proof was recorded in {proof.mode.value} mode, expected {mode.value}"
        )

    if args.expected_leaves is not None:
        summary.shape_ok = check_proof_shape(proof, args.expected_leaves, mode=mode)
        if not summary.shape_ok:
            summary.errors.append(
                f"Proof shape does not match a tree of {args.expected_leaves} leaves"
            )

    if mode_ok and summary.shape_ok is not False:
        summary.verified = verify_merkle_proof(
            root, leaf_digest, proof, hasher=hasher, mode=mode
        )
        if not summary.verified:
            summary.errors.append("Recomputed root does not match")

    if summary.verified:
        logger.info("Proof verification passed")
    else:
        logger.warning("Proof verification failed")

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS if summary.verified else EXIT_VERIFICATION_FAILED
