"""
Schemas - Error Taxonomy
File: errors.py

Purpose: Standard error taxonomy for tree construction and proof handling.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Every failure here is a caller contract violation (empty input, a leaf
that does not belong to the tree, a malformed serialized proof), so no
error is retryable. Proof verification never raises; it returns False.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Construction Errors
    EMPTY_INPUT = "EMPTY_INPUT"

    # Proof Errors
    INVALID_LEAF = "INVALID_LEAF"
    MERKLE_PROOF_INVALID = "MERKLE_PROOF_INVALID"
    PROOF_FORMAT_ERROR = "PROOF_FORMAT_ERROR"

    # Setup Errors
    HASHER_CONFIGURATION_ERROR = "HASHER_CONFIGURATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class MerkleError(BaseModel):
    """
    Base error model for structured error communication.

    Used when an error has to be reported as data (e.g. the CLI's JSON
    output) rather than raised.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.EMPTY_INPUT],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "MerkleException":
        """Convert this error model to a raised exception."""
        return MerkleException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


class LeafError(MerkleError):
    """Error model for proof requests against an invalid leaf."""

    code: str = Field(default=ErrorCodes.INVALID_LEAF)
    leaf_index: int | None = Field(
        default=None,
        description="Index of the leaf that was requested",
    )
    leaf_count: int | None = Field(
        default=None,
        description="Number of real leaves in the tree",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class MerkleException(Exception):
    """
    Base exception for all Merkle tree errors.

    This exception carries structured error information and can be
    converted to/from MerkleError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "MERKLE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> MerkleError:
        """Convert this exception to a MerkleError model."""
        return MerkleError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class EmptyInputException(MerkleException):
    """Raised when a tree is built from zero blocks."""

    def __init__(
        self,
        message: str = "Cannot build a Merkle tree from an empty block list",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EMPTY_INPUT,
            details=details,
            retryable=False,
        )


class InvalidLeafException(MerkleException):
    """Raised when a proof is requested for a node that is not a real leaf of the tree."""

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_LEAF,
            details=full_details,
            retryable=False,
        )


class ProofFormatException(MerkleException):
    """Raised when a serialized proof cannot be decoded."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.PROOF_FORMAT_ERROR,
            details=full_details,
            retryable=False,
        )


class HasherConfigurationException(MerkleException):
    """Raised when the requested hash algorithm is not available."""

    def __init__(
        self,
        message: str,
        algorithm: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if algorithm:
            full_details["algorithm"] = algorithm
        super().__init__(
            message=message,
            code=ErrorCodes.HASHER_CONFIGURATION_ERROR,
            details=full_details,
            retryable=False,
        )


class ConfigurationException(MerkleException):
    """Raised when a configuration value is invalid."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if key:
            full_details["key"] = key
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIGURATION_ERROR,
            details=full_details,
            retryable=False,
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
