"""Tests for storage bridges and the driver registry."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from storage_s3.infra.storage.bridge import (
    S3StorageBridge,
    StorageBridgeRegistry,
    create_storage,
    default_registry,
)
from storage_s3.infra.storage.client import (
    MissingOptionError,
    StorageConfig,
    StorageConfigError,
    UnsupportedDriverError,
)
from storage_s3.infra.storage.s3_storage import S3Storage


@pytest.fixture(autouse=True)
def mock_s3():
    mock_client = MagicMock()
    with patch.object(S3Storage, "_build_client", return_value=mock_client):
        yield mock_client


class TestS3StorageBridge:
    @pytest.mark.parametrize(
        ("driver", "expected"),
        [
            ("s3", True),
            ("S3", False),
            (" s3", False),
            ("s3 ", False),
            ("local", False),
            ("ftp", False),
            ("", False),
        ],
    )
    def test_supports(self, driver, expected):
        assert S3StorageBridge().supports(driver) is expected

    def test_create(self, s3_options):
        storage = S3StorageBridge().create(StorageConfig(driver="s3", options=s3_options))

        assert isinstance(storage, S3Storage)
        assert storage.bucket == "test-bucket"

    def test_create_accepts_any_object_with_options(self, s3_options):
        storage = S3StorageBridge().create(SimpleNamespace(options=s3_options))

        assert isinstance(storage, S3Storage)

    def test_create_without_options(self):
        with pytest.raises(StorageConfigError, match="no options"):
            S3StorageBridge().create(SimpleNamespace())

    def test_create_with_none_options(self):
        with pytest.raises(StorageConfigError, match="no options"):
            S3StorageBridge().create(SimpleNamespace(options=None))

    @pytest.mark.parametrize(
        "options",
        [
            ["bucket", "region"],
            "bucket=b&region=r",
            {"bucket": "b", "region": "r", "url_expiration": 60},
            {"bucket": "b", 1: "r"},
        ],
    )
    def test_create_rejects_malformed_options(self, options):
        with pytest.raises(StorageConfigError, match="mapping of strings"):
            S3StorageBridge().create(SimpleNamespace(options=options))

    def test_create_delegates_option_validation(self):
        with pytest.raises(MissingOptionError, match="region"):
            S3StorageBridge().create(SimpleNamespace(options={"bucket": "b"}))


class TestStorageBridgeRegistry:
    def test_resolve_first_supporting_bridge(self):
        local = MagicMock()
        local.supports.side_effect = lambda driver: driver == "local"
        s3 = S3StorageBridge()
        registry = StorageBridgeRegistry([local])
        registry.register(s3)

        assert registry.resolve("s3") is s3
        assert registry.resolve("local") is local

    def test_resolve_unknown_driver(self):
        with pytest.raises(UnsupportedDriverError, match="'ftp'") as exc:
            default_registry().resolve("ftp")

        assert exc.value.driver == "ftp"
        assert isinstance(exc.value, StorageConfigError)

    def test_create(self, s3_options):
        storage = default_registry().create(StorageConfig(driver="s3", options=s3_options))

        assert isinstance(storage, S3Storage)

    def test_create_storage_from_dsn(self):
        storage = create_storage(
            "storage://s3?bucket=my-bucket&region=eu-west-1&prefix=photos%2F&url_expiration=60"
        )

        assert isinstance(storage, S3Storage)
        assert storage.bucket == "my-bucket"
        assert storage.region == "eu-west-1"
        assert storage.prefix == "photos/"
        assert storage.url_expiration == 60

    def test_create_storage_unknown_driver(self):
        with pytest.raises(UnsupportedDriverError):
            create_storage("storage://local?root=/tmp")
