"""
Schemas
File: __init__.py

Purpose: Export the error taxonomy shared by the tree, proof and config modules.
"""

from .errors import (
    ConfigurationException,
    EmptyInputException,
    ErrorCodes,
    HasherConfigurationException,
    InvalidLeafException,
    LeafError,
    MerkleError,
    MerkleException,
    ProofFormatException,
)

__all__ = [
    "ErrorCodes",
    "MerkleError",
    "LeafError",
    "MerkleException",
    "EmptyInputException",
    "InvalidLeafException",
    "ProofFormatException",
    "HasherConfigurationException",
    "ConfigurationException",
]
