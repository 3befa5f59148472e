"""
Runtime Configuration Module

Provides configuration loading for the hash algorithm, proof mode and logging.
"""

from .runtime import (
    MerkleConfig,
    get_default_config,
    get_default_config_template,
    load_config,
    set_default_config,
)

__all__ = [
    "MerkleConfig",
    "load_config",
    "get_default_config",
    "set_default_config",
    "get_default_config_template",
]
