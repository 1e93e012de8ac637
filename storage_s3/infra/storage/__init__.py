"""Object storage adapters.

This package exposes the file-storage port the host application depends on
and the S3 implementation of it, usable with AWS S3, MinIO and other
S3-compatible services.
"""

from .bridge import (
    S3StorageBridge,
    StorageBridgeRegistry,
    create_storage,
    default_registry,
)
from .client import (
    FileStorage,
    InvalidInputError,
    MissingOptionError,
    ObjectNotFoundError,
    StorageBridge,
    StorageConfig,
    StorageConfigError,
    StorageError,
    StorageOperationError,
    StoredObject,
    UnsupportedDriverError,
)
from .s3_storage import S3Storage

__all__ = [
    "FileStorage",
    "InvalidInputError",
    "MissingOptionError",
    "ObjectNotFoundError",
    "S3Storage",
    "S3StorageBridge",
    "StorageBridge",
    "StorageBridgeRegistry",
    "StorageConfig",
    "StorageConfigError",
    "StorageError",
    "StorageOperationError",
    "StoredObject",
    "UnsupportedDriverError",
    "create_storage",
    "default_registry",
]
