"""
File-backed JSON document store.

Each record lives in its own <id>.json file directly under one directory.
A sorted listing of those files is cached in memory; it validates removals
and drives bulk reads, and it is refreshed synchronously after mutations.
"""
from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

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

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"

# Longest file name most filesystems accept, in bytes
MAX_FILE_NAME_BYTES = 255
# Extra bytes of the ".{name}.{token}.tmp" name used while writing
TEMP_NAME_OVERHEAD = len("..") + 8 + len(".tmp")

Record = Dict[str, Any]
DirectoryPath = Union[str, "os.PathLike[str]"]


@dataclass
class BulkReadResult:
    """Outcome of a bulk read that keeps going past failed files."""

    records: List[Record] = field(default_factory=list)
    failures: Dict[str, StoreError] = field(default_factory=dict)


def normalize_directory(directory: Optional[DirectoryPath]) -> str:
    """
    Validate a directory path and give it exactly one trailing separator.

    Raises:
        ConfigurationError: If the path is None, not a string or blank
    """
    if directory is None:
        raise ConfigurationError("No directory specified")
    if isinstance(directory, os.PathLike):
        directory = os.fspath(directory)
    if not isinstance(directory, str):
        raise ConfigurationError(f"Directory must be a string, got {type(directory).__name__}")
    if not directory.strip():
        raise ConfigurationError("Directory must not be an empty string")
    if "\x00" in directory:
        raise ConfigurationError(f"Directory contains a null byte: {directory!r}")

    separators = "".join(sep for sep in {"/", os.sep, os.altsep} if sep)
    return directory.rstrip(separators) + os.sep


def record_file_name(record_id: Any) -> str:
    """
    Map a record id to its file name inside the store directory.

    Ids already ending in ".json" are used as is, so names from the listing
    are accepted wherever an id is.

    Raises:
        InvalidArgumentError: If the id cannot be used as a single file name
    """
    name = str(record_id)
    forbidden = {"/", os.sep, os.altsep, "\x00"} - {None}
    if not name or name in (".", "..") or any(char in name for char in forbidden):
        raise InvalidArgumentError(f"Invalid record id: {record_id!r}")

    file_name = name if name.endswith(RECORD_SUFFIX) else name + RECORD_SUFFIX
    if len(os.fsencode(file_name)) + TEMP_NAME_OVERHEAD > MAX_FILE_NAME_BYTES:
        raise InvalidArgumentError(f"Record id is too long for a file name: {name[:32]}...")
    return file_name


def _require_sequence(value: Any, name: str) -> None:
    if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, Sequence):
        logger.error(f"{name} must be a list, got {type(value).__name__}")
        raise InvalidArgumentError(f"{name} must be a list of items, got {type(value).__name__}")


def _first_failure(results: Sequence[Any]) -> Optional[BaseException]:
    for result in results:
        if isinstance(result, BaseException):
            return result
    return None


class BaseDocumentStore(ABC):
    """
    Abstract interface of a keyed JSON record store.

    Client code depends on this interface so another backend can replace
    the file-based one without changes.
    """

    @abstractmethod
    async def get(self, record_id: Any) -> Record:
        """
        Load one record.

        Raises:
            NotFoundError: If no record exists for the id
            CorruptDataError: If the stored content is not valid JSON
        """
        pass

    @abstractmethod
    async def get_bulk(self) -> List[Record]:
        """Load every listed record; fails as a whole if any read fails."""
        pass

    @abstractmethod
    async def put(self, record: Mapping[str, Any], refresh_listing: bool = True) -> Record:
        """
        Store a record, overwriting any record with the same id.

        Returns:
            The stored record, including its resolved "id"
        """
        pass

    @abstractmethod
    async def put_bulk(self, records: Sequence[Mapping[str, Any]]) -> List[Record]:
        """Store several records; returns them in input order."""
        pass

    @abstractmethod
    async def remove(self, record_id: Any, refresh_listing: bool = True) -> None:
        """Delete one record."""
        pass

    @abstractmethod
    async def remove_bulk(self, record_ids: Sequence[Any]) -> None:
        """Delete several records."""
        pass

    @abstractmethod
    def list_ids(self) -> List[str]:
        """Return a copy of the known record file names."""
        pass


class DocumentStore(BaseDocumentStore):
    """
    Directory-backed JSON record store.

    Storage structure:
        {directory}/{id}.json

    File I/O runs in worker threads. The listing refresh is synchronous on
    purpose: the cache is consistent before any dependent operation runs.
    Concurrent operations on overlapping ids have no ordering guarantee and
    no atomicity across files.
    """

    def __init__(self, directory: Optional[DirectoryPath]):
        """
        Initialize DocumentStore.

        Args:
            directory: Existing directory holding the records. It is never created.

        Raises:
            ConfigurationError: If directory is None, not a string or blank
            StorageUnavailableError: If the directory cannot be listed
        """
        self._directory = normalize_directory(directory)
        self._files: List[str] = self._list_directory(self._directory)
        logger.info(
            f"DocumentStore initialized with directory={self._directory} "
            f"({len(self._files)} records)"
        )

    @classmethod
    def from_config(cls) -> "DocumentStore":
        """Create a store on the directory from DOCSTORE_DIRECTORY."""
        from .config import get_store_config

        return cls(get_store_config()["directory"])

    @property
    def directory(self) -> str:
        return self._directory

    def _path(self, file_name: str) -> Path:
        return Path(self._directory) / file_name

    @staticmethod
    def _list_directory(directory: str) -> List[str]:
        try:
            with os.scandir(directory) as entries:
                names = [
                    entry.name
                    for entry in entries
                    if entry.name.endswith(RECORD_SUFFIX) and entry.is_file()
                ]
        except OSError as e:
            logger.error(f"Failed to list directory {directory}: {e}")
            raise StorageUnavailableError(f"Cannot list directory {directory}: {e}") from e
        return sorted(names)

    def refresh_listing(self) -> List[str]:
        """
        Re-read the directory listing into the cache.

        IMPORTANT: This operation is synchronous and blocks the event loop.

        Returns:
            Copy of the refreshed listing

        Raises:
            StorageUnavailableError: If the directory cannot be listed.
                The cache keeps its previous content.
        """
        self._files = self._list_directory(self._directory)
        logger.debug(f"Listing refreshed: {len(self._files)} records in {self._directory}")
        return list(self._files)

    def list_ids(self) -> List[str]:
        return list(self._files)

    async def change_directory(self, directory: Optional[DirectoryPath]) -> None:
        """
        Point the store at another directory and refresh the listing.

        The listing itself stays synchronous, like every refresh. The switch
        only happens once the new directory has been listed, so a failed call
        leaves the store on its previous directory.

        Raises:
            ConfigurationError: If directory is None, not a string or blank
            StorageUnavailableError: If the new directory cannot be listed
        """
        normalized = normalize_directory(directory)
        files = self._list_directory(normalized)
        previous = self._directory
        self._directory = normalized
        self._files = files
        logger.info(f"DocumentStore moved from {previous} to {normalized} ({len(files)} records)")

    async def get(self, record_id: Any) -> Record:
        """
        Load a record from its JSON file.

        Args:
            record_id: Record id, with or without the ".json" suffix

        Returns:
            Parsed record

        Raises:
            NotFoundError: If the file does not exist
            CorruptDataError: If the content is not valid JSON
            ReadError: On any other filesystem failure
        """
        path = self._path(record_file_name(record_id))

        try:
            raw = await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as e:
            logger.error(f"Record {record_id} not found at {path}")
            raise NotFoundError(f"No record found for id {record_id!r}") from e
        except OSError as e:
            logger.error(f"Failed to read record {record_id}: {e}")
            raise ReadError(f"Failed to read record {record_id!r}") from e

        try:
            record = json.loads(raw)
        except ValueError as e:
            logger.error(f"Invalid JSON for record {record_id}: {e}")
            raise CorruptDataError(f"Corrupted record {record_id!r}: {e}") from e

        logger.debug(f"Loaded record {record_id} from {path}")
        return record

    async def _gather_reads(self) -> tuple[List[str], List[Any]]:
        files = list(self._files)
        results = await asyncio.gather(
            *(self.get(file_name) for file_name in files), return_exceptions=True
        )
        return files, results

    async def get_bulk(self) -> List[Record]:
        """
        Load every record in the listing, in listing order.

        Reads run concurrently. Once all of them have finished, the first
        failure in listing order is raised; no partial result is returned.
        Use get_bulk_partial() to keep the records that could be read.
        """
        _, results = await self._gather_reads()

        failure = _first_failure(results)
        if failure is not None:
            raise failure

        logger.info(f"Loaded {len(results)} records from {self._directory}")
        return list(results)

    async def get_bulk_partial(self) -> BulkReadResult:
        """
        Load every record in the listing, collecting per-file failures.

        Returns:
            BulkReadResult with the readable records in listing order and
            the StoreError raised for each file that could not be read
        """
        files, results = await self._gather_reads()

        bulk = BulkReadResult()
        for file_name, result in zip(files, results):
            if isinstance(result, StoreError):
                bulk.failures[file_name] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                bulk.records.append(result)

        if bulk.failures:
            logger.warning(
                f"Loaded {len(bulk.records)} records from {self._directory}, "
                f"{len(bulk.failures)} failed: {sorted(bulk.failures)}"
            )
        return bulk

    @staticmethod
    def _write_atomic(path: Path, payload: str) -> None:
        # Temp file + replace; unique temp name so concurrent puts never share one
        temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(payload)
            temp_path.replace(path)
        except OSError:
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)
            raise

    async def put(self, record: Mapping[str, Any], refresh_listing: bool = True) -> Record:
        """
        Write a record to {directory}/{id}.json.

        A record without an id (or with id None) gets a random hex token.
        The input mapping is left untouched.

        Args:
            record: JSON-serializable mapping
            refresh_listing: Refresh the listing cache after the write

        Returns:
            Copy of the record carrying its resolved "id"

        Raises:
            InvalidArgumentError: If the record is not a mapping, is not
                JSON-serializable or has an unusable id
            WriteError: If the file cannot be written
            StorageUnavailableError: If the refresh after the write fails
        """
        if not isinstance(record, Mapping):
            logger.error(f"Record must be a mapping, got {type(record).__name__}")
            raise InvalidArgumentError(f"Record must be a mapping, got {type(record).__name__}")

        record_id = record.get("id")
        if record_id is None:
            record_id = uuid.uuid4().hex
            logger.warning(f"No id field was set in the record, generated id {record_id}")

        file_name = record_file_name(record_id)
        stored: Record = dict(record)
        stored["id"] = record_id

        try:
            payload = json.dumps(stored, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Record {record_id} is not JSON-serializable: {e}")
            raise InvalidArgumentError(f"Record {record_id!r} is not JSON-serializable: {e}") from e

        path = self._path(file_name)
        try:
            await asyncio.to_thread(self._write_atomic, path, payload)
        except OSError as e:
            logger.error(f"Failed to write record {record_id}: {e}")
            raise WriteError(f"Failed to write record {record_id!r}") from e

        logger.debug(f"Saved record {record_id} to {path}")
        if refresh_listing:
            self.refresh_listing()
        return stored

    def _refresh_after_bulk(self, operation: str, results: Sequence[Any]) -> None:
        failure = _first_failure(results)
        if failure is None:
            self.refresh_listing()
            return

        logger.error(f"{operation} failed: {failure}")
        try:
            self.refresh_listing()
        except StorageUnavailableError as refresh_error:
            logger.error(f"Listing refresh after failed {operation} also failed: {refresh_error}")
            raise failure
        raise failure

    async def put_bulk(self, records: Sequence[Mapping[str, Any]]) -> List[Record]:
        """
        Store several records concurrently.

        Every put runs with the listing refresh suppressed. Once all of them
        have finished the listing is refreshed exactly once, and the first
        failure in input order (if any) is raised. Records that were written
        before a failure stay on disk.

        Args:
            records: List of JSON-serializable mappings

        Returns:
            Stored records in input order, each with its resolved "id"

        Raises:
            InvalidArgumentError: If records is not a list (before any I/O)
        """
        _require_sequence(records, "records")

        results = await asyncio.gather(
            *(self.put(record, refresh_listing=False) for record in records),
            return_exceptions=True,
        )
        self._refresh_after_bulk("put_bulk", results)

        logger.info(f"Stored {len(results)} records in {self._directory}")
        return list(results)

    async def remove(self, record_id: Any, refresh_listing: bool = True) -> None:
        """
        Delete a record file.

        Existence is checked against the listing cache, not the filesystem:
        an id missing from the cache is rejected without touching the disk.

        Raises:
            NotFoundError: If the id is not in the listing cache, or the file
                disappeared since the last refresh
            DeleteError: If the file cannot be deleted
            StorageUnavailableError: If the refresh after the delete fails
        """
        file_name = record_file_name(record_id)
        if file_name not in self._files:
            logger.error(f"File not found for id {record_id!r}")
            raise NotFoundError(f"No record found for id {record_id!r}")

        path = self._path(file_name)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError as e:
            logger.error(f"Record {record_id} vanished from {path}")
            raise NotFoundError(f"No record found for id {record_id!r}") from e
        except OSError as e:
            logger.error(f"There was an error removing record {record_id}: {e}")
            raise DeleteError(f"Failed to delete record {record_id!r}") from e

        logger.debug(f"Removed record {record_id} at {path}")
        if refresh_listing:
            self.refresh_listing()

    async def remove_bulk(self, record_ids: Sequence[Any]) -> None:
        """
        Delete several records concurrently.

        Every remove runs with the listing refresh suppressed and all of them
        run to completion, so valid ids are deleted even when others fail.
        The listing is then refreshed exactly once and the first failure in
        input order (if any) is raised.

        Raises:
            InvalidArgumentError: If record_ids is not a list (before any I/O)
        """
        _require_sequence(record_ids, "record_ids")

        results = await asyncio.gather(
            *(self.remove(record_id, refresh_listing=False) for record_id in record_ids),
            return_exceptions=True,
        )
        self._refresh_after_bulk("remove_bulk", results)

        logger.info(f"Removed {len(results)} records from {self._directory}")
