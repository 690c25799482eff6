"""File system storage backend."""

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any

from ..archive import create_archive, extract_archive
from ..exceptions import StorageError
from .base import FILE_EXTENSION, BaseBackend

logger = logging.getLogger(__name__)


class FileSystemBackend(BaseBackend):
    """Configuration stored as one JSON file per record.

    Records live at ``<directory>/<name>.json``. Names are concatenated
    into paths as given; use ``validate_name`` before handing untrusted
    names to this backend.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    @classmethod
    def url_prefix(cls) -> str:
        return "file"

    @classmethod
    def from_specifier(cls, specifier: str) -> "FileSystemBackend":
        """Create a backend from a ``file:<directory>`` specifier."""
        prefix, _, location = specifier.partition(":")
        if prefix != cls.url_prefix() or not location:
            raise StorageError(f"Invalid file storage specifier: {specifier}")
        return cls(Path(location))

    @property
    def specifier(self) -> str:
        return f"{self.url_prefix()}:{self.directory}"

    def get_file_path(self, name: str) -> Path:
        """Get file path for a record name."""
        return Path(f"{self.directory}{os.sep}{name}{FILE_EXTENSION}")

    def initialize_storage(self) -> None:
        """Create the directory and make sure it is writable."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            if not os.access(self.directory, os.W_OK):
                mode = self.directory.stat().st_mode
                self.directory.chmod(mode | stat.S_IWUSR | stat.S_IXUSR)
        except OSError as e:
            raise StorageError(
                f"Failed to create config directory {self.directory}: {e}"
            ) from e

        if not os.access(self.directory, os.W_OK):
            raise StorageError(f"Config directory {self.directory} is not writable")

        logger.debug(f"Config directory ready at {self.directory}")

    def is_initialized(self) -> bool:
        try:
            return self.directory.is_dir()
        except OSError:
            return False

    def exists(self, name: str) -> bool:
        try:
            return self.get_file_path(name).is_file()
        except (OSError, ValueError):
            return False

    def read(self, name: str) -> dict[str, Any] | None:
        """Read a record from its file."""
        if not self.exists(name):
            return None

        path = self.get_file_path(name)
        try:
            contents = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {name} from {path}: {e}", name=name) from e

        return self._decode(name, contents)

    def write(self, name: str, data: dict[str, Any]) -> None:
        """Write a record to its file atomically."""
        contents = self._encode(name, data)
        path = self.get_file_path(name)

        if not self.is_initialized():
            self.initialize_storage()

        try:
            self._write_file_atomic(path, contents)
        except (OSError, ValueError) as e:
            raise StorageError(
                f"Failed to write configuration {name} to {path}: {e}", name=name
            ) from e

        logger.debug(f"Wrote configuration {name}")

    def _write_file_atomic(self, path: Path, contents: str) -> None:
        """Write file atomically using a temporary file."""
        temp_fd, temp_path = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(contents)

            Path(temp_path).replace(path)
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise

    def delete(self, name: str) -> bool:
        """Delete a record file."""
        if not self.exists(name):
            if not self.is_initialized():
                raise StorageError(
                    f"Config directory {self.directory} does not exist", name=name
                )
            return False

        try:
            self.get_file_path(name).unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {name}: {e}", name=name) from e

        logger.debug(f"Deleted configuration {name}")
        return True

    def rename(self, name: str, new_name: str) -> None:
        """Move a record file, replacing any record already at new_name."""
        try:
            self.get_file_path(name).replace(self.get_file_path(new_name))
        except (OSError, ValueError) as e:
            raise StorageError(
                f"Failed to rename configuration {name} to {new_name}: {e}", name=name
            ) from e

        logger.info(f"Renamed configuration {name} to {new_name}")

    def get_modified_time(self, name: str) -> float | None:
        """Get the filesystem change time of a record file."""
        try:
            return self.get_file_path(name).stat().st_ctime
        except (OSError, ValueError):
            return None

    def list_all(self, prefix: str = "") -> list[str]:
        """Get all record names starting with prefix."""
        if not self.is_initialized():
            raise StorageError(f"Config directory {self.directory} does not exist")

        names = []
        try:
            for path in self.directory.glob(f"*{FILE_EXTENSION}"):
                if path.is_file():
                    name = path.stem
                    if name.startswith(prefix):
                        names.append(name)
        except OSError as e:
            raise StorageError(f"Failed to list {self.directory}: {e}") from e

        return names

    def export_archive(self, destination: Path) -> Path:
        """Bundle every record file into a tar archive."""
        members = {
            f"{name}{FILE_EXTENSION}": self.get_file_path(name)
            for name in self.list_all()
        }
        return create_archive(Path(destination), members)

    def import_archive(self, source: Path) -> list[str]:
        """Extract a tar archive straight into the directory."""
        if not self.is_initialized():
            self.initialize_storage()

        extracted = extract_archive(Path(source), self.directory)
        names = [
            member[: -len(FILE_EXTENSION)]
            for member in extracted
            if member.endswith(FILE_EXTENSION) and "/" not in member
        ]

        logger.info(f"Imported {len(names)} configuration files from {source}")
        return names
