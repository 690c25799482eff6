"""Pluggable configuration storage backends.

Provides one contract over two media:

- **FileSystemBackend**: one JSON file per record, atomic writes
- **DatabaseBackend**: one row per record in a SQLite table

Both inject ``_config_name`` into stored records and strip it on read.
"""

from .base import FILE_EXTENSION, NAME_KEY, BaseBackend, validate_name
from .database import DatabaseBackend
from .filesystem import FileSystemBackend

__all__ = [
    "BaseBackend",
    "DatabaseBackend",
    "FILE_EXTENSION",
    "FileSystemBackend",
    "NAME_KEY",
    "validate_name",
]
