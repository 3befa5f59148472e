"""
boiler-merkle CLI

Command-line interface for building Merkle trees and checking inclusion proofs.

Usage:
    python -m boiler_merkle_cli build "a" "b" "c"
    python -m boiler_merkle_cli prove "a" "b" "c" --index 1 --out proof.json
    python -m boiler_merkle_cli verify --root 0x... --proof proof.json --block "b"
    python -m boiler_merkle_cli demo
"""

__version__ = "0.1.0"
