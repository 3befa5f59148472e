"""
Pytest configuration and shared fixtures for boiler-merkle tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Isolates tests from MERKLE_* environment variables
"""

import os
import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from boiler_merkle.merkle.merkle_tree import build_merkle_tree  # noqa: E402


SAMPLE_BLOCKS = [
    "Soham is goated",
    "Adithya is kinda lame",
    "another example data block",
    "boom",
]


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture(autouse=True)
def clean_merkle_env(monkeypatch):
    """Strip MERKLE_* variables so a developer's shell cannot leak into tests."""
    for key in list(os.environ):
        if key.startswith("MERKLE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def sample_blocks():
    """The four sample blocks (already a power of two)."""
    return list(SAMPLE_BLOCKS)


@pytest.fixture
def sample_tree(sample_blocks):
    """Tree built from the sample blocks."""
    return build_merkle_tree(sample_blocks)


@pytest.fixture
def odd_blocks():
    """Five blocks, padded to eight leaves."""
    return [f"block-{i}" for i in range(5)]


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
