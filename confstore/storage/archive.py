"""Tar archive helpers for exporting and importing configuration.

Archives are flat: one ``<name>.json`` member per record at the archive
root, holding the same text the file backend keeps on disk. Destinations
ending in ``.gz`` or ``.tgz`` are gzip-compressed; reading detects the
compression automatically.
"""

import logging
import tarfile
from collections.abc import Mapping
from pathlib import Path

from .exceptions import StorageError

logger = logging.getLogger(__name__)

COMPRESSED_SUFFIXES = (".gz", ".tgz")


def _write_mode(destination: Path) -> str:
    """Pick the tarfile mode for a destination path."""
    if destination.name.endswith(COMPRESSED_SUFFIXES):
        return "w:gz"
    return "w"


def create_archive(destination: Path, members: Mapping[str, Path]) -> Path:
    """Write files into a new archive.

    Args:
        destination: Archive path to create (overwritten if present)
        members: Mapping of archive member name to source file

    Returns:
        Path of the written archive
    """
    destination = Path(destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with tarfile.open(destination, _write_mode(destination)) as tar:
            for arcname, path in members.items():
                tar.add(path, arcname=arcname, recursive=False)
    except (OSError, tarfile.TarError) as e:
        raise StorageError(f"Failed to create archive {destination}: {e}") from e

    logger.info(f"Exported {len(members)} configuration files to {destination}")
    return destination


def list_archive(source: Path) -> list[str]:
    """List regular file members of an archive."""
    try:
        with tarfile.open(source, "r:*") as tar:
            return [member.name for member in tar.getmembers() if member.isfile()]
    except (OSError, tarfile.TarError) as e:
        raise StorageError(f"Failed to read archive {source}: {e}") from e


def extract_archive(source: Path, directory: Path) -> list[str]:
    """Extract the regular files of an archive into a directory.

    Existing files with the same name are overwritten. Members with
    absolute paths or parent references are refused by the ``data``
    extraction filter.

    Returns:
        Names of the extracted members
    """
    try:
        with tarfile.open(source, "r:*") as tar:
            members = [member for member in tar.getmembers() if member.isfile()]
            tar.extractall(directory, members=members, filter="data")
    except (OSError, tarfile.TarError) as e:
        logger.error(f"Failed to import archive {source}: {e}")
        raise StorageError(f"Failed to import archive {source}: {e}") from e

    return [member.name for member in members]
