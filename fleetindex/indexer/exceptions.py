"""Custom exceptions for the indexer module.

Contains exception classes for the build's failure modes. Every one of them
aborts the whole build; nothing is retried.
"""


class FleetIndexError(Exception):
    """Base class for fleetindex build failures.

    Attributes:
        message: Human-readable error description
        details: Dict of extra context for debugging
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class DocumentError(FleetIndexError):
    """A package source file is missing, unreadable or structurally malformed."""


class MappingError(DocumentError):
    """A value could not be serialized into its JSON column."""


class ProcessorFlattenError(MappingError):
    """A processor's attributes could not be serialized.

    Attributes:
        json_pointer: Locator of the offending processor
    """

    def __init__(self, message: str, json_pointer: str, details: dict | None = None):
        super().__init__(message, details)
        self.json_pointer = json_pointer


class PersistenceError(FleetIndexError):
    """SQLite rejected a write (constraint violation, I/O failure)."""


class PackageWriteError(PersistenceError):
    """A package transaction was rolled back.

    Attributes:
        dir_name: Directory name of the package that failed
    """

    def __init__(self, dir_name: str, cause: Exception):
        super().__init__(f"failed inserting {dir_name!r}: {cause}", {"dir_name": dir_name})
        self.dir_name = dir_name
