"""
Docstore: JSON records persisted as one file per id.

Provides an abstract store interface and a directory-backed implementation
with a cached file listing.
"""
from .config import ensure_directory, get_store_config, setup_logging
from .document_store import BaseDocumentStore, BulkReadResult, DocumentStore
from .errors import (
    ConfigurationError,
    CorruptDataError,
    DeleteError,
    InvalidArgumentError,
    NotFoundError,
    ReadError,
    StorageUnavailableError,
    StoreError,
    WriteError,
)

__all__ = [
    "BaseDocumentStore",
    "DocumentStore",
    "BulkReadResult",
    "StoreError",
    "ConfigurationError",
    "StorageUnavailableError",
    "InvalidArgumentError",
    "NotFoundError",
    "CorruptDataError",
    "ReadError",
    "WriteError",
    "DeleteError",
    "get_store_config",
    "ensure_directory",
    "setup_logging",
]
