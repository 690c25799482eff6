"""Configuration storage CLI.

A command-line interface for reading, writing and archiving configuration
records. Built with Click and Rich.
"""

from confstore.cli.main import cli

__all__ = ["cli"]
