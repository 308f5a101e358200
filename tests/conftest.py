"""Shared test fixtures for placement tracker tests."""

import sys
from pathlib import Path

import pytest

# Ensure the repo root (pkg/, board_server.py) is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from pkg.placement.persistence import MemoryBackend, PersistenceAdapter
from pkg.placement.tracker import PlacementTracker


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def adapter(backend):
    return PersistenceAdapter(backend)


@pytest.fixture
def tracker(adapter):
    return PlacementTracker(adapter)
