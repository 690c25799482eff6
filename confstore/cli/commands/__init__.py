"""CLI command implementations."""

from . import archive, records

__all__ = ["archive", "records"]
