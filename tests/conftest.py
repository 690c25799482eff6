"""Pytest configuration and fixtures."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and config lookup for each test.

    Config files are searched under XDG_CONFIG_HOME and the working
    directory, so both point into the test's own temporary directory.
    """
    original_env = os.environ.copy()

    monkeypatch.delenv("CONFSTORE_STORAGE", raising=False)
    monkeypatch.delenv("CONFSTORE_DB_PATH", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))
    monkeypatch.chdir(tmp_path)

    yield

    os.environ.clear()
    os.environ.update(original_env)
