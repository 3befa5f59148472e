"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m boiler_merkle_cli build "a" "b" "c" [--json] [--tree]
    python -m boiler_merkle_cli show "a" "b" "c" [--short]
    python -m boiler_merkle_cli prove "a" "b" "c" --index 1 [--out proof.json]
    python -m boiler_merkle_cli verify --root 0x... --proof proof.json [--block "b"]
    python -m boiler_merkle_cli demo
    python -m boiler_merkle_cli config --init

Environment Variables:
    MERKLE_HASH_ALGORITHM       hashlib algorithm (default: sha256)
    MERKLE_PROOF_MODE           positional or sorted (default: positional)
    MERKLE_LOG_LEVEL            Log level (default: INFO)
    MERKLE_LOG_FILE             Optional log file
    MERKLE_SHORT_DIGESTS        Truncate digests in tree output (default: false)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from boiler_merkle.merkle.merkle_tree import ProofMode
from boiler_merkle.schemas.errors import MerkleException
from boiler_merkle_cli.commands import build, demo, prove, verify
from boiler_merkle.config.runtime import (
    DEFAULT_CONFIG_FILENAMES,
    get_default_config_template,
    load_config,
)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def _add_block_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "blocks",
        nargs="*",
        help="Data blocks in order",
    )
    parser.add_argument(
        "--file", "-f",
        type=str,
        default=None,
        help="Read additional blocks from a file, one per line",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="boiler-merkle",
        description="Build Merkle trees, generate inclusion proofs, and verify them.",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s 0.1.0"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./boiler-merkle.json if present)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--algorithm",
        type=str,
        default=None,
        help="hashlib algorithm name (overrides config)",
    )
    parser.add_argument(
        "--mode",
        type=str,
        choices=[m.value for m in ProofMode],
        default=None,
        help="Pair combination rule (overrides config; 'sorted' does not bind positions)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build a tree and print its root digest",
    )
    _add_block_arguments(build_parser)
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    build_parser.add_argument(
        "--tree",
        action="store_true",
        default=False,
        help="Also render the tree",
    )
    build_parser.add_argument(
        "--short",
        action="store_true",
        default=False,
        help="Truncate digests in the rendered tree",
    )
    build_parser.set_defaults(func=build.build_cmd)

    # --- show command ---
    show_parser = subparsers.add_parser(
        "show",
        help="Render a tree for inspection",
    )
    _add_block_arguments(show_parser)
    show_parser.add_argument(
        "--short",
        action="store_true",
        default=False,
        help="Truncate digests",
    )
    show_parser.set_defaults(func=build.show_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Generate an inclusion proof for one block",
        description="Build a tree from the blocks and write the proof for --index as JSON.",
    )
    _add_block_arguments(prove_parser)
    prove_parser.add_argument(
        "--index", "-i",
        type=int,
        required=True,
        help="0-based index of the block to prove",
    )
    prove_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write the proof to this file instead of stdout",
    )
    prove_parser.set_defaults(func=prove.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify an inclusion proof against a trusted root",
    )
    verify_parser.add_argument(
        "--root",
        type=str,
        required=True,
        help="Trusted root digest (0x-prefixed hex)",
    )
    verify_parser.add_argument(
        "--proof", "-p",
        type=str,
        required=True,
        help="Proof JSON file written by the prove command",
    )
    leaf_group = verify_parser.add_mutually_exclusive_group()
    leaf_group.add_argument(
        "--block",
        type=str,
        default=None,
        help="Raw block to check (hashed as a leaf)",
    )
    leaf_group.add_argument(
        "--leaf",
        type=str,
        default=None,
        help="Leaf digest to check (0x-prefixed hex)",
    )
    verify_parser.add_argument(
        "--expected-leaves",
        type=int,
        default=None,
        help="Reject proofs whose shape does not fit a tree of this many blocks",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- demo command ---
    demo_parser = subparsers.add_parser(
        "demo",
        help="Build, print, prove and verify the sample tree",
    )
    demo_parser.add_argument(
        "--index",
        type=int,
        default=1,
        help="Sample block to prove (default: 1)",
    )
    demo_parser.add_argument(
        "--short",
        action="store_true",
        default=False,
        help="Truncate digests",
    )
    demo_parser.set_defaults(func=demo.demo_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default=DEFAULT_CONFIG_FILENAMES[0],
        help=f"Path for config file (default: {DEFAULT_CONFIG_FILENAMES[0]})",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("You can also use environment variables (MERKLE_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: boiler-merkle config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except (MerkleException, FileNotFoundError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except (MerkleException, OSError) as e:
        if log_level.upper() == "DEBUG":
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
