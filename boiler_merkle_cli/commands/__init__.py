"""
CLI command modules.
"""

from boiler_merkle_cli.commands import build, demo, prove, verify

__all__ = ["build", "demo", "prove", "verify"]
