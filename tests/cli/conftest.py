"""Pytest configuration and fixtures for CLI tests."""

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from confstore.cli.main import cli


@pytest.fixture
def storage_dir(tmp_path):
    """Directory used by the file storage runner."""
    return tmp_path / "config" / "active"


@pytest.fixture
def database_path(tmp_path):
    """SQLite file used by the database storage runner."""
    return tmp_path / "config.sqlite"


@pytest.fixture
def config_file(tmp_path, database_path):
    """YAML config selecting database storage."""
    path = tmp_path / "settings" / "confstore.yaml"
    path.parent.mkdir(parents=True)
    path.write_text(
        yaml.safe_dump(
            {
                "storage": "db:/default/config",
                "connections": {"default": str(database_path)},
            }
        )
    )
    return path


@pytest.fixture
def cli_runner(storage_dir):
    """Click CLI test runner bound to file storage."""

    class ConfStoreCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            """Invoke the CLI with file storage in a temporary directory."""
            if isinstance(args, list):
                args = ["--storage", f"file:{storage_dir}", *args]
                return super().invoke(cli, args, **kwargs)
            return super().invoke(args, **kwargs)

    return ConfStoreCliRunner()


@pytest.fixture
def db_cli_runner(config_file):
    """Click CLI test runner bound to database storage."""

    class ConfStoreCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            """Invoke the CLI with the database config file."""
            if isinstance(args, list):
                args = ["--config", str(config_file), *args]
                return super().invoke(cli, args, **kwargs)
            return super().invoke(args, **kwargs)

    return ConfStoreCliRunner()


@pytest.fixture
def record_file(tmp_path):
    """JSON file holding a configuration record."""
    path = tmp_path / "record.json"
    path.write_text(json.dumps({"name": "From File", "enabled": True}))
    return path


def populate(runner, records: dict) -> None:
    """Write records through the CLI."""
    for name, data in records.items():
        result = runner.invoke(["set", name, "--value", json.dumps(data)])
        assert result.exit_code == 0, result.output


@pytest.fixture
def populated_storage(cli_runner):
    """File storage holding a few records."""
    populate(
        cli_runner,
        {
            "system.site": {"name": "Test Site", "page": {"front": "/node"}},
            "system.menu": {"links": ["home", "about"]},
            "user.settings": {"anonymous": "Guest"},
        },
    )
    return cli_runner


@pytest.fixture
def populated_db(db_cli_runner):
    """Database storage holding a few records."""
    populate(
        db_cli_runner,
        {
            "system.site": {"name": "Database Site"},
            "views.view.frontpage": {"status": True},
        },
    )
    return db_cli_runner


@pytest.fixture
def archive_path(tmp_path) -> Path:
    """Destination for exported archives."""
    return tmp_path / "exports" / "config.tar.gz"
