"""JSON codec for configuration records.

Records are serialized with msgspec: keys sorted at every level, four-space
indentation and a trailing newline, so the same record always produces the
same bytes on disk and in the database.
"""

import math
from typing import Any

import msgspec

from .exceptions import DecodeError, EncodeError

INDENT = 4


def _check_value(value: Any, path: str) -> None:
    """Reject values that would not read back unchanged from JSON."""
    if value is None or isinstance(value, (str, bool, int)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise EncodeError(f"Cannot encode non-finite number at {path}: {value}")
        return
    if isinstance(value, list):
        for index, item in enumerate(value):
            _check_value(item, f"{path}[{index}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise EncodeError(f"Cannot encode non-string key {key!r} at {path}")
            _check_value(item, f"{path}.{key}")
        return
    raise EncodeError(
        f"Cannot encode configuration record: unsupported {type(value).__name__} at {path}"
    )


def encode(record: dict[str, Any]) -> str:
    """Serialize a record to canonical, pretty-printed JSON text."""
    if not isinstance(record, dict):
        raise EncodeError(
            f"Configuration record must be a mapping, got {type(record).__name__}"
        )

    _check_value(record, "record")

    try:
        raw = msgspec.json.encode(record, order="sorted")
    except (TypeError, ValueError, msgspec.EncodeError) as e:
        raise EncodeError(f"Cannot encode configuration record: {e}") from e

    return msgspec.json.format(raw, indent=INDENT).decode("utf-8") + "\n"


def decode(text: str | bytes) -> dict[str, Any]:
    """Parse JSON text into a record.

    Empty input, malformed JSON, ``null`` and any non-object value are all
    rejected: an absent configuration is never a valid stored state.
    """
    if not text or not text.strip():
        raise DecodeError("Cannot decode empty configuration data")

    try:
        data = msgspec.json.decode(text)
    except msgspec.DecodeError as e:
        raise DecodeError(f"Invalid JSON: {e}") from e

    if data is None:
        raise DecodeError("Configuration data decoded to null")
    if not isinstance(data, dict):
        raise DecodeError(
            f"Configuration data must be a JSON object, got {type(data).__name__}"
        )

    return data
