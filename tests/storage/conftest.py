"""Shared fixtures for storage tests."""

import tempfile
from pathlib import Path

import pytest

from confstore.storage.connections import ConnectionManager


@pytest.fixture
def temp_dir():
    """Temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def connections(temp_dir):
    """Connection manager with a file-backed default target."""
    manager = ConnectionManager({"default": temp_dir / "config.sqlite"})
    yield manager
    manager.close()


@pytest.fixture
def sample_record():
    """A typical configuration record."""
    return {
        "name": "Test Site",
        "mail": "admin@example.com",
        "page": {"front": "/node", "403": "", "404": ""},
        "admin_compact_mode": False,
        "weight_select_max": 100,
    }
