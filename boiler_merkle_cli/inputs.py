"""
Shared argument handling for CLI commands.
"""

from __future__ import annotations

from argparse import Namespace
from pathlib import Path

from boiler_merkle.config.runtime import MerkleConfig
from boiler_merkle.crypto.hashing import Hasher
from boiler_merkle.merkle.merkle_tree import ProofMode


def read_blocks(args: Namespace) -> list[bytes | str]:
    """
    Collect blocks from positional arguments and/or --file.

    A file holds one block per line. Lines are kept as raw bytes, so the
    file need not be valid UTF-8; the line terminator is not part of the
    block.
    """
    blocks: list[bytes | str] = list(getattr(args, "blocks", None) or [])
    path = getattr(args, "file", None)
    if path:
        blocks.extend(Path(path).read_bytes().splitlines())
    return blocks


def get_config(args: Namespace) -> MerkleConfig:
    return getattr(args, "cli_config", None) or MerkleConfig()


def resolve_hasher(args: Namespace, fallback: str | None = None) -> Hasher:
    """--algorithm, then an explicit fallback (e.g. the proof's own), then config."""
    algorithm = getattr(args, "algorithm", None) or fallback or get_config(args).hash_algorithm
    return Hasher(algorithm)


def resolve_mode(args: Namespace) -> ProofMode:
    """--mode, then config. Never taken from a proof file."""
    mode = getattr(args, "mode", None)
    if mode:
        return ProofMode(mode)
    return get_config(args).proof_mode_enum()
