"""
Runtime Configuration

Hash algorithm, proof mode and logging settings for the library and CLI.
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from boiler_merkle.crypto.hashing import DEFAULT_ALGORITHM, Hasher
from boiler_merkle.merkle.merkle_tree import ProofMode
from boiler_merkle.schemas.errors import (
    ConfigurationException,
    HasherConfigurationException,
)

load_dotenv()


# Environment variable prefix
ENV_PREFIX = "MERKLE_"

DEFAULT_CONFIG_FILENAMES = ("boiler-merkle.json", "boiler-merkle.yaml", "boiler-merkle.yml")

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class MerkleConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (MERKLE_* prefix, .env supported)
    - JSON or YAML file
    - Programmatic construction
    """
    hash_algorithm: str = DEFAULT_ALGORITHM
    proof_mode: str = ProofMode.POSITIONAL.value
    log_level: str = "INFO"
    log_file: Optional[str] = None
    short_digests: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        Check every field.

        Raises:
            ConfigurationException: On an unknown mode, log level or algorithm
        """
        try:
            ProofMode(self.proof_mode)
        except ValueError as e:
            raise ConfigurationException(
                f"Invalid proof mode: {self.proof_mode!r} "
                f"(expected one of {[m.value for m in ProofMode]})",
                key="proof_mode",
            ) from e

        if not isinstance(self.log_level, str) or self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigurationException(
                f"Invalid log level: {self.log_level!r}",
                key="log_level",
            )

        if self.log_file is not None and not isinstance(self.log_file, str):
            raise ConfigurationException(
                f"Invalid log file: {self.log_file!r}",
                key="log_file",
            )

        if not isinstance(self.hash_algorithm, str):
            raise ConfigurationException(
                f"Invalid hash algorithm: {self.hash_algorithm!r}",
                key="hash_algorithm",
            )
        try:
            Hasher(self.hash_algorithm)
        except HasherConfigurationException as e:
            raise ConfigurationException(
                e.message,
                key="hash_algorithm",
                details={"algorithm": self.hash_algorithm},
            ) from e

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - MERKLE_HASH_ALGORITHM: hashlib algorithm name
        - MERKLE_PROOF_MODE: positional | sorted
        - MERKLE_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR
        - MERKLE_LOG_FILE: optional log file path
        - MERKLE_SHORT_DIGESTS: truncate digests in tree rendering (true/false)
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM"):
            overrides["hash_algorithm"] = os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM")
        if os.getenv(f"{ENV_PREFIX}PROOF_MODE"):
            overrides["proof_mode"] = os.getenv(f"{ENV_PREFIX}PROOF_MODE", "").lower()
        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper()
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides["log_file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")
        if os.getenv(f"{ENV_PREFIX}SHORT_DIGESTS"):
            overrides["short_digests"] = (
                os.getenv(f"{ENV_PREFIX}SHORT_DIGESTS", "false").lower() in _TRUE_VALUES
            )

        return overrides

    @classmethod
    def from_env(cls) -> "MerkleConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MerkleConfig":
        """Load configuration from a dictionary (supports partial data)."""
        if not isinstance(data, dict):
            raise ConfigurationException(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigurationException(
                f"Unknown configuration keys: {', '.join(unknown)}",
                details={"keys": unknown},
            )
        return cls(**known)

    @classmethod
    def from_file(cls, path: str | Path) -> "MerkleConfig":
        """Load configuration from a JSON file, or YAML by extension."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        if path.suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)

        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise ConfigurationException(f"Invalid JSON in {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "MerkleConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except (yaml.YAMLError, UnicodeDecodeError) as e:
                raise ConfigurationException(f"Invalid YAML in {path}: {e}") from e

        return cls.from_dict(data)

    def with_env_overrides(self) -> "MerkleConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for key, value in overrides.items():
            setattr(new_config, key, value)
        new_config.validate()
        return new_config

    def build_hasher(self) -> Hasher:
        return Hasher(self.hash_algorithm)

    def proof_mode_enum(self) -> ProofMode:
        return ProofMode(self.proof_mode)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "hash_algorithm": self.hash_algorithm,
            "proof_mode": self.proof_mode,
            "log_level": self.log_level,
            "log_file": self.log_file,
            "short_digests": self.short_digests,
        }


def load_config(config_path: Path | None = None) -> MerkleConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings. Without an explicit
    path, the first default file found in the working directory is used.
    """
    config = MerkleConfig()

    if config_path is not None:
        config = MerkleConfig.from_file(config_path)
    else:
        for name in DEFAULT_CONFIG_FILENAMES:
            default_path = Path.cwd() / name
            if default_path.exists():
                config = MerkleConfig.from_file(default_path)
                break

    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return json.dumps(MerkleConfig().to_dict(), indent=2) + "\n"


# Global default configuration
_default_config: Optional[MerkleConfig] = None


def get_default_config() -> MerkleConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = MerkleConfig.from_env()
    return _default_config


def set_default_config(config: MerkleConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
