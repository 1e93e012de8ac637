"""Storage bridges and the registry the host resolves drivers through."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from storage_s3.infra.storage.client import (
    FileStorage,
    StorageBridge,
    StorageConfig,
    StorageConfigError,
    UnsupportedDriverError,
)
from storage_s3.infra.storage.s3_storage import ADAPTER_NAME, S3Storage


class S3StorageBridge:
    """Bridge for the Amazon S3 storage adapter.

    Supports driver: "s3"

    DSN example: storage://s3?bucket=my-bucket&region=eu-west-1
    """

    def supports(self, driver: str) -> bool:
        return driver == ADAPTER_NAME

    def create(self, config: Any) -> FileStorage:
        """Build an ``S3Storage`` from ``config.options``.

        Raises:
            StorageConfigError: If ``options`` is missing or is not a mapping of
                strings to strings. Option-level validation is left to
                ``S3Storage``.
        """
        options = getattr(config, "options", None)
        if options is None:
            raise StorageConfigError("Storage configuration has no options")
        if not isinstance(options, Mapping) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in options.items()
        ):
            raise StorageConfigError(
                "Storage options must be a mapping of strings to strings"
            )
        return S3Storage(options)


class StorageBridgeRegistry:
    """Ordered collection of bridges; the first one supporting a driver wins."""

    def __init__(self, bridges: list[StorageBridge] | None = None) -> None:
        self._bridges: list[StorageBridge] = list(bridges or [])

    def register(self, bridge: StorageBridge) -> None:
        self._bridges.append(bridge)

    def resolve(self, driver: str) -> StorageBridge:
        for bridge in self._bridges:
            if bridge.supports(driver):
                return bridge
        raise UnsupportedDriverError(driver)

    def create(self, config: StorageConfig) -> FileStorage:
        return self.resolve(config.driver).create(config)


def default_registry() -> StorageBridgeRegistry:
    return StorageBridgeRegistry([S3StorageBridge()])


def create_storage(config: str | StorageConfig) -> FileStorage:
    """Build a storage adapter from a DSN string or a parsed ``StorageConfig``."""
    if isinstance(config, str):
        config = StorageConfig.from_dsn(config)
    return default_registry().create(config)
