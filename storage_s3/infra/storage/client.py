"""File storage port, configuration and data types.

This module defines the interface the host application consumes for file
persistence, the error hierarchy shared by storage adapters, and the
configuration object bridges build adapters from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import IO, Any, Mapping, Protocol
from urllib.parse import parse_qsl, urlsplit

DSN_SCHEME = "storage"


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class StorageConfigError(StorageError):
    """Raised when a storage adapter cannot be built from its configuration."""


class MissingOptionError(StorageConfigError):
    """Raised when a required configuration option is absent."""

    def __init__(self, option: str) -> None:
        super().__init__(f"Missing required option: {option}")
        self.option = option


class UnsupportedDriverError(StorageConfigError):
    """Raised when no registered bridge handles a driver."""

    def __init__(self, driver: str) -> None:
        super().__init__(f"No storage bridge supports driver: {driver!r}")
        self.driver = driver


class InvalidInputError(StorageError, ValueError):
    """Raised when an operation receives a malformed argument."""


class ObjectNotFoundError(StorageError):
    """Raised when the requested object does not exist."""

    def __init__(self, message: str, *, key: str) -> None:
        super().__init__(message)
        self.key = key


class StorageOperationError(StorageError):
    """Raised when a transport or service failure interrupts an operation."""


@dataclass(frozen=True, slots=True)
class StoredObject:
    """Metadata returned after a successful save."""

    key: str
    adapter: str
    stored_at: datetime


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Driver name plus the options a bridge builds an adapter from."""

    driver: str
    options: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dsn(cls, dsn: str) -> "StorageConfig":
        """Parse a ``storage://<driver>?key=value&...`` connection string.

        Raises:
            StorageConfigError: If the scheme is not ``storage`` or the driver
                is empty.
        """
        parts = urlsplit(dsn.strip())
        if parts.scheme != DSN_SCHEME:
            raise StorageConfigError(
                f"Storage DSN must use the '{DSN_SCHEME}://' scheme, got: {parts.scheme or '<none>'}"
            )
        driver = parts.netloc
        if not driver:
            raise StorageConfigError("Storage DSN is missing a driver name")
        options = dict(parse_qsl(parts.query, keep_blank_values=True))
        return cls(driver=driver, options=options)


class FileStorage(Protocol):
    """Protocol every storage backend exposes to the host application.

    Keys passed to these methods are logical keys; adapters map them to
    their physical location.
    """

    def save(
        self,
        stream: IO[bytes],
        key: str,
        mime_type: str,
        size_in_bytes: int,
    ) -> StoredObject:
        """Persist the content of ``stream`` under ``key``.

        The stream is read but not closed.

        Raises:
            InvalidInputError: If ``stream`` is not a readable binary stream.
            StorageOperationError: If the backend rejects the upload.
        """
        ...

    def read_stream(self, key: str) -> IO[bytes]:
        """Open the object stored under ``key`` for reading.

        The caller owns the returned stream and must close it.

        Raises:
            ObjectNotFoundError: If nothing is stored under ``key``.
            StorageOperationError: For any other failure.
        """
        ...

    def delete(self, key: str) -> None:
        """Remove the object stored under ``key``; absent objects are ignored."""
        ...

    def exists(self, key: str) -> bool:
        """Return whether an object is stored under ``key``."""
        ...

    def url(self, key: str) -> str | None:
        """Return a URL granting read access to ``key``, if the backend has one."""
        ...


class StorageBridge(Protocol):
    """Factory that builds a ``FileStorage`` for the drivers it supports."""

    def supports(self, driver: str) -> bool:
        ...

    def create(self, config: Any) -> FileStorage:
        ...
