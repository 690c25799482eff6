"""Backend selection from specifier strings.

A specifier names the backend kind by its prefix and the location after
the colon::

    file:/var/lib/site/config
    db:/default/config
"""

from .backends.base import BaseBackend
from .backends.database import DatabaseBackend
from .backends.filesystem import FileSystemBackend
from .connections import ConnectionManager
from .exceptions import StorageError

BACKENDS: dict[str, type[BaseBackend]] = {
    FileSystemBackend.url_prefix(): FileSystemBackend,
    DatabaseBackend.url_prefix(): DatabaseBackend,
}


def available_backends() -> list[str]:
    """Get the registered specifier prefixes."""
    return list(BACKENDS)


def get_backend(
    specifier: str, connections: ConnectionManager | None = None
) -> BaseBackend:
    """Create the backend a specifier points at.

    Args:
        specifier: ``file:<directory>`` or ``db:/<target>/<table>``
        connections: Database connections, required for ``db:`` specifiers

    Raises:
        StorageError: If the prefix is unknown, the specifier is malformed,
            or a database backend is requested without connections.
    """
    prefix, sep, _ = specifier.partition(":")
    backend_class = BACKENDS.get(prefix) if sep else None
    if backend_class is None:
        raise StorageError(f"Unknown storage specifier: {specifier}")

    if backend_class is DatabaseBackend:
        if connections is None:
            raise StorageError(
                f"Database storage {specifier} requires configured connections"
            )
        return DatabaseBackend.from_specifier(specifier, connections)

    return FileSystemBackend.from_specifier(specifier)
