"""Build pipeline: flatten, project and write Fleet packages into SQLite."""

from .exceptions import (
    DocumentError,
    FleetIndexError,
    MappingError,
    PackageWriteError,
    PersistenceError,
    ProcessorFlattenError,
)

__all__ = [
    "DocumentError",
    "FleetIndexError",
    "MappingError",
    "PackageWriteError",
    "PersistenceError",
    "ProcessorFlattenError",
]
