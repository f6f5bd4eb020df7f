"""
Exceptions raised by the document store.

Every error derives from StoreError so callers can catch the whole family.
"""


class StoreError(Exception):
    """Base exception for document store errors."""

    pass


class ConfigurationError(StoreError):
    """Directory path is missing, not a string, or blank."""

    pass


class StorageUnavailableError(StoreError):
    """Directory cannot be listed (missing, not a directory, unreadable)."""

    pass


class InvalidArgumentError(StoreError):
    """Operation was given an argument it cannot work with."""

    pass


class NotFoundError(StoreError):
    """Requested record does not exist."""

    pass


class CorruptDataError(StoreError):
    """Stored content is not valid JSON."""

    pass


class ReadError(StoreError):
    """Filesystem failure while reading a record."""

    pass


class WriteError(StoreError):
    """Filesystem failure while writing a record."""

    pass


class DeleteError(StoreError):
    """Filesystem failure while deleting a record."""

    pass
