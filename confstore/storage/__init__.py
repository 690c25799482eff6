"""Configuration record storage layer.

Provides a single storage contract with interchangeable backends:

- **Codec**: canonical JSON encoding of records (msgspec)
- **Backends**: JSON files in a directory, or rows in a SQLite table
- **Connections**: named SQLite targets injected into database backends
- **Archives**: tar export and import of every record in a backend
- **Factory**: backend selection from ``file:`` / ``db:`` specifiers
"""

from confstore.storage.backends import (
    FILE_EXTENSION,
    NAME_KEY,
    BaseBackend,
    DatabaseBackend,
    FileSystemBackend,
    validate_name,
)
from confstore.storage.codec import decode, encode
from confstore.storage.connections import DEFAULT_TARGET, ConnectionManager
from confstore.storage.exceptions import (
    CodecError,
    DecodeError,
    EncodeError,
    ReadError,
    StorageError,
)
from confstore.storage.factory import available_backends, get_backend

__all__ = [
    # Backends
    "BaseBackend",
    "FileSystemBackend",
    "DatabaseBackend",
    "FILE_EXTENSION",
    "NAME_KEY",
    "validate_name",
    # Codec
    "encode",
    "decode",
    # Connections
    "ConnectionManager",
    "DEFAULT_TARGET",
    # Errors
    "StorageError",
    "ReadError",
    "CodecError",
    "EncodeError",
    "DecodeError",
    # Factory
    "get_backend",
    "available_backends",
]
