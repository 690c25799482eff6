"""Named SQLite connections shared by database backends.

A ``ConnectionManager`` is created by the application and handed to every
``DatabaseBackend`` it builds. Each target maps a name such as ``default``
to a database file (or ``:memory:``); the connection is opened on first use
and kept until ``close()``.
"""

import logging
import sqlite3
import threading
from pathlib import Path

from .exceptions import StorageError

logger = logging.getLogger(__name__)

DEFAULT_TARGET = "default"
MEMORY_DATABASE = ":memory:"


class ConnectionManager:
    """Registry of database targets with lazily opened connections."""

    def __init__(self, targets: dict[str, str | Path] | None = None):
        self._targets: dict[str, str] = {
            name: str(database) for name, database in (targets or {}).items()
        }
        self._connections: dict[str, sqlite3.Connection] = {}
        self._lock = threading.RLock()

    def add_target(self, name: str, database: str | Path) -> None:
        """Register a database for a target name."""
        with self._lock:
            if name in self._connections:
                raise StorageError(f"Database target '{name}' is already connected")
            self._targets[name] = str(database)

    def has_target(self, name: str) -> bool:
        """Check if a target name is registered."""
        return name in self._targets

    def targets(self) -> list[str]:
        """Get all registered target names."""
        return list(self._targets)

    def get(self, name: str = DEFAULT_TARGET) -> sqlite3.Connection:
        """Get the connection for a target, opening it if needed."""
        with self._lock:
            if name in self._connections:
                return self._connections[name]

            if name not in self._targets:
                raise StorageError(
                    f"No database connection configured for target '{name}'"
                )

            database = self._targets[name]
            try:
                if database != MEMORY_DATABASE:
                    Path(database).parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(database, check_same_thread=False)
                if database != MEMORY_DATABASE:
                    conn.execute("PRAGMA journal_mode=WAL")
            except (OSError, sqlite3.Error) as e:
                raise StorageError(
                    f"Failed to connect to database target '{name}': {e}"
                ) from e

            conn.row_factory = sqlite3.Row
            self._connections[name] = conn
            logger.debug(f"Opened database target '{name}' at {database}")
            return conn

    def close(self, name: str | None = None) -> None:
        """Close one target's connection, or all of them."""
        with self._lock:
            names = [name] if name is not None else list(self._connections)
            for target in names:
                conn = self._connections.pop(target, None)
                if conn is not None:
                    conn.close()

    def __enter__(self) -> "ConnectionManager":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ConnectionManager(targets={self.targets()})"
