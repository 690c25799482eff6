"""Base storage backend interface."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .. import codec
from ..exceptions import DecodeError, EncodeError, ReadError, StorageError

logger = logging.getLogger(__name__)

# Injected into every stored record and stripped again on read.
NAME_KEY = "_config_name"

FILE_EXTENSION = ".json"

MAX_NAME_LENGTH = 255


def validate_name(name: str) -> None:
    """Reject names that cannot be stored safely.

    Backends map names straight onto file paths and primary keys without
    sanitising them, so callers are expected to run this first.

    Raises:
        ValueError: If the name is empty, too long, or could escape the
            storage location.
    """
    if not name or not name.strip():
        raise ValueError("Configuration name cannot be empty")

    if len(name) > MAX_NAME_LENGTH:
        raise ValueError(
            f"Configuration name too long (max {MAX_NAME_LENGTH} characters)"
        )

    if any(c in name for c in ("/", "\\", "\x00")):
        raise ValueError(f"Configuration name contains invalid characters: {name!r}")

    if name in (".", ".."):
        raise ValueError(f"Configuration name is not allowed: {name!r}")


class BaseBackend(ABC):
    """Abstract base class for configuration storage backends."""

    @classmethod
    @abstractmethod
    def url_prefix(cls) -> str:
        """Identifier used in specifier strings."""
        pass

    @property
    @abstractmethod
    def specifier(self) -> str:
        """Specifier string that selects this backend and location."""
        pass

    @abstractmethod
    def initialize_storage(self) -> None:
        """Create the storage location if absent."""
        pass

    @abstractmethod
    def is_initialized(self) -> bool:
        """Check if the storage location is ready."""
        pass

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Check if a record exists."""
        pass

    @abstractmethod
    def read(self, name: str) -> dict[str, Any] | None:
        """Read a record by name, or None when it is absent."""
        pass

    @abstractmethod
    def write(self, name: str, data: dict[str, Any]) -> None:
        """Write a record, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Delete a record by name."""
        pass

    @abstractmethod
    def rename(self, name: str, new_name: str) -> None:
        """Move a record to a new name."""
        pass

    @abstractmethod
    def get_modified_time(self, name: str) -> float | int | None:
        """Get the timestamp tracked for a record."""
        pass

    @abstractmethod
    def list_all(self, prefix: str = "") -> list[str]:
        """Get all names starting with prefix."""
        pass

    @abstractmethod
    def export_archive(self, destination: Path) -> Path:
        """Bundle every record into a tar archive."""
        pass

    @abstractmethod
    def import_archive(self, source: Path) -> list[str]:
        """Load every record from a tar archive."""
        pass

    def read_multiple(self, names: Iterable[str]) -> dict[str, dict[str, Any]]:
        """Read several records, skipping the ones that do not exist."""
        records = {}
        for name in names:
            data = self.read(name)
            if data is not None:
                records[name] = data
        return records

    def delete_all(self, prefix: str = "") -> bool:
        """Delete every record starting with prefix.

        Keeps going when a single deletion fails and reports whether all
        of them succeeded.
        """
        success = True
        for name in self.list_all(prefix):
            try:
                if not self.delete(name):
                    success = False
            except StorageError as e:
                logger.warning(f"Failed to delete {name}: {e}")
                success = False
        return success

    def close(self) -> None:
        """Release resources held by the backend."""
        pass

    def _encode(self, name: str, data: dict[str, Any]) -> str:
        """Encode a record for storage, injecting its name."""
        try:
            return codec.encode({**data, NAME_KEY: name})
        except EncodeError as e:
            raise StorageError(f"Failed to encode {name}: {e}", name=name) from e
        except TypeError as e:
            raise StorageError(
                f"Failed to encode {name}: record must be a mapping", name=name
            ) from e

    def _decode(self, name: str, contents: str | bytes) -> dict[str, Any]:
        """Decode stored contents and strip the injected name."""
        try:
            data = codec.decode(contents)
        except DecodeError as e:
            raise ReadError(name, contents, str(e)) from e

        data.pop(NAME_KEY, None)
        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.specifier!r})"
