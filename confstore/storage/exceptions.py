"""Exception classes for configuration storage."""

from typing import Any


class StorageError(Exception):
    """Base exception for storage medium failures."""

    def __init__(self, message: str, name: str | None = None):
        """Initialize with message and the affected record name, if any."""
        self.name = name
        super().__init__(message)


class ReadError(StorageError):
    """Raised when a stored record cannot be decoded."""

    def __init__(self, name: str, contents: Any, details: str = ""):
        """Initialize with record name, raw contents and decode details."""
        self.contents = contents
        message = f"Failed to read configuration {name}"
        if details:
            message += f": {details}"
        super().__init__(message, name=name)


class CodecError(ValueError):
    """Base exception for encode/decode failures."""

    pass


class EncodeError(CodecError):
    """Raised when a record cannot be serialized."""

    pass


class DecodeError(CodecError):
    """Raised when text cannot be parsed into a record."""

    pass
