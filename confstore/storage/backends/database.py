"""SQLite storage backend."""

import logging
import re
import sqlite3
import tempfile
import threading
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ..archive import create_archive, extract_archive
from ..connections import DEFAULT_TARGET, ConnectionManager
from ..exceptions import ReadError, StorageError
from .base import FILE_EXTENSION, MAX_NAME_LENGTH, BaseBackend

logger = logging.getLogger(__name__)

# db:/<target>/<table>, db://<table>, db:/<table> or db:<table>
SPECIFIER_PATTERN = re.compile(r"^db:(?:/(?:(\w*)/)?)?(\w+)$")

TABLE_PATTERN = re.compile(r"\w+")

SCHEMA = """
    CREATE TABLE IF NOT EXISTS "{table}" (
        name VARCHAR({max_name}) NOT NULL DEFAULT '' PRIMARY KEY,
        data TEXT,
        ctime INTEGER NOT NULL DEFAULT 0
    )
"""


class DatabaseBackend(BaseBackend):
    """Configuration stored as rows of a single table.

    Each row holds the record name, the encoded JSON (including the
    injected name) and ``ctime``, the time of the first insert. Later
    writes replace ``data`` but leave ``ctime`` alone, so
    ``get_modified_time`` reports creation time here while the file
    backend reports the last change.

    The connection comes from an injected ``ConnectionManager`` and is
    looked up by target name on every call.
    """

    def __init__(
        self,
        table: str,
        connections: ConnectionManager,
        target: str = DEFAULT_TARGET,
    ):
        if not TABLE_PATTERN.fullmatch(table or ""):
            raise StorageError(f"Invalid table name: {table!r}")

        self.table = table
        self.target = target or DEFAULT_TARGET
        self.connections = connections
        self._lock = threading.RLock()

    @classmethod
    def url_prefix(cls) -> str:
        return "db"

    @classmethod
    def parse_specifier(cls, specifier: str) -> tuple[str, str]:
        """Split a ``db:`` specifier into (target, table)."""
        match = SPECIFIER_PATTERN.fullmatch(specifier)
        if not match:
            raise StorageError(f"Invalid database storage specifier: {specifier}")
        return match.group(1) or DEFAULT_TARGET, match.group(2)

    @classmethod
    def from_specifier(
        cls, specifier: str, connections: ConnectionManager
    ) -> "DatabaseBackend":
        """Create a backend from a ``db:`` specifier."""
        target, table = cls.parse_specifier(specifier)
        return cls(table, connections, target)

    @property
    def specifier(self) -> str:
        return f"{self.url_prefix()}:/{self.target}/{self.table}"

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the connection for this backend's target."""
        return self.connections.get(self.target)

    def initialize_storage(self) -> None:
        """Create the table if it does not exist."""
        try:
            with self._lock:
                conn = self.connection
                conn.execute(SCHEMA.format(table=self.table, max_name=MAX_NAME_LENGTH))
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to create table {self.table}: {e}") from e

        logger.debug(f"Config table {self.table} ready on target '{self.target}'")

    def is_initialized(self) -> bool:
        try:
            with self._lock:
                cursor = self.connection.execute(
                    "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
                    (self.table,),
                )
                return cursor.fetchone() is not None
        except (StorageError, sqlite3.Error):
            return False

    def exists(self, name: str) -> bool:
        try:
            with self._lock:
                cursor = self.connection.execute(
                    f'SELECT 1 FROM "{self.table}" WHERE name = ? LIMIT 1', (name,)
                )
                return cursor.fetchone() is not None
        except (StorageError, sqlite3.Error):
            return False

    def _has_medium(self) -> bool:
        """Check the target is configured and the table exists."""
        return self.connections.has_target(self.target) and self.is_initialized()

    def read(self, name: str) -> dict[str, Any] | None:
        """Read a record from its row."""
        # Without a table or connection there is nothing to read.
        if not self._has_medium():
            return None

        try:
            with self._lock:
                cursor = self.connection.execute(
                    f'SELECT data FROM "{self.table}" WHERE name = ?', (name,)
                )
                row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(
                f"Failed to read {name} from table {self.table}: {e}", name=name
            ) from e

        if row is None:
            return None
        return self._decode(name, row["data"])

    def read_multiple(self, names: Iterable[str]) -> dict[str, dict[str, Any]]:
        """Read several records, batching names below the bound-variable limit."""
        names = list(dict.fromkeys(names))
        if not names or not self._has_medium():
            return {}

        records = {}
        try:
            with self._lock:
                conn = self.connection
                batch_size = conn.getlimit(sqlite3.SQLITE_LIMIT_VARIABLE_NUMBER)
                for start in range(0, len(names), batch_size):
                    batch = names[start : start + batch_size]
                    placeholders = ", ".join("?" for _ in batch)
                    cursor = conn.execute(
                        f'SELECT name, data FROM "{self.table}" '
                        f"WHERE name IN ({placeholders})",
                        batch,
                    )
                    for row in cursor:
                        records[row["name"]] = self._decode(row["name"], row["data"])
        except sqlite3.Error as e:
            raise StorageError(
                f"Failed to read {len(names)} records from table {self.table}: {e}"
            ) from e

        return records

    def write(self, name: str, data: dict[str, Any]) -> None:
        """Write a record to its row."""
        contents = self._encode(name, data)

        if not self.is_initialized():
            self.initialize_storage()

        try:
            self._write_row(name, contents)
        except sqlite3.Error as e:
            raise StorageError(
                f"Failed to write configuration {name} to table {self.table}: {e}",
                name=name,
            ) from e

        logger.debug(f"Wrote configuration {name}")

    def _write_row(self, name: str, contents: str) -> None:
        """Upsert a row and stamp ctime if this was its first insert."""
        with self._lock:
            conn = self.connection
            with conn:
                conn.execute(
                    f'INSERT INTO "{self.table}" (name, data) VALUES (?, ?) '
                    "ON CONFLICT(name) DO UPDATE SET data = excluded.data",
                    (name, contents),
                )
                conn.execute(
                    f'UPDATE "{self.table}" SET ctime = ? '
                    "WHERE name = ? AND ctime = 0",
                    (int(time.time()), name),
                )

    def delete(self, name: str) -> bool:
        """Delete a record row."""
        try:
            with self._lock:
                conn = self.connection
                with conn:
                    cursor = conn.execute(
                        f'DELETE FROM "{self.table}" WHERE name = ?', (name,)
                    )
        except sqlite3.Error as e:
            raise StorageError(
                f"Failed to delete {name} from table {self.table}: {e}", name=name
            ) from e

        if cursor.rowcount > 0:
            logger.debug(f"Deleted configuration {name}")
            return True
        return False

    def rename(self, name: str, new_name: str) -> None:
        """Move a record row, replacing any row already at new_name.

        Both statements run in one transaction, so a failure leaves the
        source and destination rows as they were.
        """
        if name == new_name:
            if not self.exists(name):
                raise StorageError(f"Configuration {name} does not exist", name=name)
            return

        try:
            with self._lock:
                conn = self.connection
                with conn:
                    conn.execute(
                        f'DELETE FROM "{self.table}" WHERE name = ?', (new_name,)
                    )
                    cursor = conn.execute(
                        f'UPDATE "{self.table}" SET name = ? WHERE name = ?',
                        (new_name, name),
                    )
                    if cursor.rowcount == 0:
                        raise StorageError(
                            f"Configuration {name} does not exist", name=name
                        )
        except sqlite3.Error as e:
            raise StorageError(
                f"Failed to rename configuration {name} to {new_name}: {e}", name=name
            ) from e

        logger.info(f"Renamed configuration {name} to {new_name}")

    def get_modified_time(self, name: str) -> int | None:
        """Get the creation time stamped on a record's first insert."""
        try:
            with self._lock:
                cursor = self.connection.execute(
                    f'SELECT ctime FROM "{self.table}" WHERE name = ?', (name,)
                )
                row = cursor.fetchone()
        except (StorageError, sqlite3.Error):
            return None

        return row["ctime"] if row is not None else None

    def list_all(self, prefix: str = "") -> list[str]:
        """Get all record names starting with prefix.

        The prefix is compared literally, without LIKE wildcards.
        """
        query = f'SELECT name FROM "{self.table}"'
        params: list[Any] = []
        if prefix:
            query += " WHERE substr(name, 1, ?) = ?"
            params = [len(prefix), prefix]

        try:
            with self._lock:
                cursor = self.connection.execute(query, params)
                return [row["name"] for row in cursor]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list table {self.table}: {e}") from e

    def _read_raw_rows(self) -> list[tuple[str, str]]:
        """Get (name, stored JSON) for every row."""
        try:
            with self._lock:
                cursor = self.connection.execute(
                    f'SELECT name, data FROM "{self.table}"'
                )
                return [(row["name"], row["data"] or "") for row in cursor]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read table {self.table}: {e}") from e

    def export_archive(self, destination: Path) -> Path:
        """Stage every row as a file, then bundle them into a tar archive."""
        rows = self._read_raw_rows()

        with tempfile.TemporaryDirectory(prefix="confstore-export-") as staging:
            staging_dir = Path(staging)
            members = {}
            for name, contents in rows:
                path = staging_dir / f"{name}{FILE_EXTENSION}"
                try:
                    path.write_text(contents, encoding="utf-8")
                except OSError as e:
                    raise StorageError(
                        f"Failed to stage {name} for export: {e}", name=name
                    ) from e
                members[path.name] = path

            return create_archive(Path(destination), members)

    def import_archive(self, source: Path) -> list[str]:
        """Load every ``<name>.json`` member of a tar archive into the table."""
        source = Path(source)

        if not self.is_initialized():
            self.initialize_storage()

        names = []
        with tempfile.TemporaryDirectory(prefix="confstore-import-") as staging:
            staging_dir = Path(staging)
            extract_archive(source, staging_dir)

            for path in sorted(staging_dir.glob(f"*{FILE_EXTENSION}")):
                if not path.is_file():
                    continue
                name = path.stem
                try:
                    data = self._decode(name, path.read_bytes())
                    self._write_row(name, self._encode(name, data))
                except (ReadError, OSError, sqlite3.Error) as e:
                    logger.error(f"Failed to import archive {source}: {e}")
                    raise StorageError(
                        f"Failed to import archive {source}: {e}", name=name
                    ) from e
                names.append(name)

        logger.info(f"Imported {len(names)} configuration records from {source}")
        return names
