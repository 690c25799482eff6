"""Pluggable storage for named configuration records."""

__version__ = "0.1.0"
