"""Amazon S3 storage adapter.

Stores files in AWS S3 or any S3-compatible service (MinIO, DigitalOcean
Spaces, ...) through a boto3 client.

DSN format: storage://s3?bucket=my-bucket&region=eu-west-1&endpoint=https://s3.amazonaws.com

Required options:
    - bucket: S3 bucket name
    - region: AWS region (e.g. "eu-west-1", "us-east-1")

Optional:
    - endpoint: custom endpoint URL, enables path-style addressing
    - key / access_key: access key ID (defaults to the boto3 credential chain)
    - secret / secret_key: secret access key (required if a key is given)
    - prefix: key prefix for all files (e.g. "photos/")
    - url_expiration: presigned URL lifetime in seconds (default: 3600)

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

import io
import logging
from datetime import datetime, timezone
from typing import IO, Any, Mapping

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from storage_s3.common.logging import mask_options
from storage_s3.infra.observability.metrics import track_operation
from storage_s3.infra.storage.client import (
    InvalidInputError,
    MissingOptionError,
    ObjectNotFoundError,
    StorageConfigError,
    StorageOperationError,
    StoredObject,
)

ADAPTER_NAME = "s3"
DEFAULT_URL_EXPIRATION = 3600

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}

logger = logging.getLogger(__name__)


def _first_present(options: Mapping[str, str], *names: str) -> str | None:
    for name in names:
        value = options.get(name)
        if value is not None:
            return value
    return None


def _is_not_found(exc: ClientError) -> bool:
    response = exc.response or {}
    status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    code = str(response.get("Error", {}).get("Code", ""))
    return status == 404 or code in _NOT_FOUND_CODES


def _is_readable_stream(stream: Any) -> bool:
    if isinstance(stream, (str, bytes, bytearray, memoryview, io.TextIOBase)):
        return False
    if not callable(getattr(stream, "read", None)):
        return False
    if getattr(stream, "closed", False):
        return False
    readable = getattr(stream, "readable", None)
    if callable(readable):
        try:
            return bool(readable())
        except ValueError:
            # io raises ValueError on operations against a closed file
            return False
    return True


class S3Storage:
    """File storage backed by a single S3 bucket.

    Instances are immutable: bucket, region, credentials and prefix are fixed
    at construction and the boto3 client is reused for every call.
    """

    def __init__(self, options: Mapping[str, str]) -> None:
        """Validate ``options`` and build the boto3 client.

        Raises:
            MissingOptionError: If ``bucket`` or ``region`` is absent.
            StorageConfigError: If ``url_expiration`` is not an integer.
        """
        if options.get("bucket") is None:
            raise MissingOptionError("bucket")
        if options.get("region") is None:
            raise MissingOptionError("region")

        self._bucket = options["bucket"]
        self._region = options["region"]
        self._prefix = options.get("prefix")

        raw_expiration = options.get("url_expiration")
        if raw_expiration is None:
            self._url_expiration = DEFAULT_URL_EXPIRATION
        else:
            try:
                self._url_expiration = int(raw_expiration)
            except (TypeError, ValueError) as exc:
                raise StorageConfigError(
                    f"Option url_expiration must be an integer number of seconds, got: {raw_expiration!r}"
                ) from exc

        self._client = self._build_client(
            region=self._region,
            endpoint=options.get("endpoint"),
            access_key=_first_present(options, "key", "access_key"),
            secret_key=_first_present(options, "secret", "secret_key"),
        )
        logger.debug(
            "s3 storage configured bucket=%s region=%s",
            self._bucket,
            self._region,
            extra={"extra": {"options": mask_options(options)}},
        )

    @staticmethod
    def _build_client(
        *,
        region: str,
        endpoint: str | None,
        access_key: str | None,
        secret_key: str | None,
    ) -> Any:
        """Create a boto3 S3 client.

        A custom endpoint switches to path-style addressing, which S3-compatible
        services without virtual-hosted DNS require. Credentials are passed only
        when both halves are present; otherwise boto3 resolves them itself
        (environment, shared credentials file, instance or task role).
        """
        params: dict[str, Any] = {"region_name": region}
        if endpoint is not None:
            params["endpoint_url"] = endpoint
            params["config"] = Config(s3={"addressing_style": "path"})
        if access_key is not None and secret_key is not None:
            params["aws_access_key_id"] = access_key
            params["aws_secret_access_key"] = secret_key

        return boto3.client("s3", **params)

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def region(self) -> str:
        return self._region

    @property
    def prefix(self) -> str | None:
        return self._prefix

    @property
    def url_expiration(self) -> int:
        return self._url_expiration

    def save(
        self,
        stream: IO[bytes],
        key: str,
        mime_type: str,
        size_in_bytes: int,
    ) -> StoredObject:
        """Upload ``stream`` to S3 under ``key``.

        The stream is consumed but left open for the caller to close.

        Raises:
            InvalidInputError: If ``stream`` is not a readable, open binary
                stream or ``size_in_bytes`` is not a non-negative integer.
            StorageOperationError: If the upload fails.
        """
        if not _is_readable_stream(stream):
            raise InvalidInputError("Stream must be a valid resource")
        if (
            isinstance(size_in_bytes, bool)
            or not isinstance(size_in_bytes, int)
            or size_in_bytes < 0
        ):
            raise InvalidInputError(
                f"Size must be a non-negative integer number of bytes, got: {size_in_bytes!r}"
            )

        full_key = self.build_key(key)
        with track_operation("save"):
            try:
                self._client.put_object(
                    Bucket=self._bucket,
                    Key=full_key,
                    Body=stream,
                    ContentType=mime_type,
                    ContentLength=size_in_bytes,
                )
            except Exception as exc:
                raise StorageOperationError(
                    f"Failed to upload file to S3: {exc}"
                ) from exc

        self._log("save", full_key, content_type=mime_type, size_bytes=size_in_bytes)
        return StoredObject(
            key=key,
            adapter=ADAPTER_NAME,
            stored_at=datetime.now(timezone.utc),
        )

    def read_stream(self, key: str) -> IO[bytes]:
        """Return the object body as a stream the caller must close.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StorageOperationError: If the object cannot be read.
        """
        full_key = self.build_key(key)
        with track_operation("read_stream"):
            try:
                response = self._client.get_object(Bucket=self._bucket, Key=full_key)
            except ClientError as exc:
                if _is_not_found(exc):
                    raise ObjectNotFoundError(
                        f"File not found in S3: {key}", key=key
                    ) from exc
                raise StorageOperationError(
                    f"Failed to read file from S3: {exc}"
                ) from exc
            except Exception as exc:
                raise StorageOperationError(
                    f"Failed to read file from S3: {exc}"
                ) from exc

            body = response.get("Body")
            if body is None or not callable(getattr(body, "read", None)):
                raise StorageOperationError("S3 response body is not a stream")

        self._log("read_stream", full_key)
        return body

    def delete(self, key: str) -> None:
        """Delete the object; deleting a missing object is not an error.

        Raises:
            StorageOperationError: If deletion fails.
        """
        full_key = self.build_key(key)
        with track_operation("delete"):
            try:
                self._client.delete_object(Bucket=self._bucket, Key=full_key)
            except Exception as exc:
                raise StorageOperationError(
                    f"Failed to delete file from S3: {exc}"
                ) from exc

        self._log("delete", full_key)

    def exists(self, key: str) -> bool:
        """Check whether the object exists.

        Only "not found" answers map to False; any other client error
        propagates unchanged.
        """
        full_key = self.build_key(key)
        with track_operation("exists"):
            try:
                self._client.head_object(Bucket=self._bucket, Key=full_key)
            except ClientError as exc:
                if _is_not_found(exc):
                    found = False
                else:
                    raise
            else:
                found = True

        self._log("exists", full_key, found=found)
        return found

    def url(self, key: str) -> str:
        """Return a presigned GET URL valid for ``url_expiration`` seconds."""
        full_key = self.build_key(key)
        with track_operation("url"):
            url = self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": full_key},
                ExpiresIn=self._url_expiration,
            )

        self._log("url", full_key, expires_in=self._url_expiration)
        return str(url)

    def build_key(self, key: str) -> str:
        """Map a logical key to the full key stored in the bucket."""
        if self._prefix is None:
            return key
        return self._prefix.rstrip("/") + "/" + key.lstrip("/")

    def _log(self, operation: str, full_key: str, **fields: Any) -> None:
        logger.debug(
            "s3 %s bucket=%s key=%s",
            operation,
            self._bucket,
            full_key,
            extra={
                "extra": {
                    "operation": operation,
                    "bucket": self._bucket,
                    "key": full_key,
                    **fields,
                }
            },
        )
