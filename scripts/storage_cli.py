#!/usr/bin/env python3
"""Inspect and manage files in the configured object storage.

Usage:
  .venv/bin/python scripts/storage_cli.py put ./photo.jpg photos/photo.jpg
  .venv/bin/python scripts/storage_cli.py get photos/photo.jpg -o photo.jpg
  .venv/bin/python scripts/storage_cli.py exists photos/photo.jpg
  .venv/bin/python scripts/storage_cli.py url photos/photo.jpg
  .venv/bin/python scripts/storage_cli.py rm photos/photo.jpg

The storage is selected by --dsn or the STORAGE_DSN setting, e.g.
storage://s3?bucket=my-bucket&region=eu-west-1
"""

from __future__ import annotations

import argparse
import logging
import mimetypes
import shutil
import sys
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError

from storage_s3.common.config import get_settings
from storage_s3.common.logging import setup_logging
from storage_s3.infra.storage import FileStorage, StorageError, create_storage

DEFAULT_CONTENT_TYPE = "application/octet-stream"

logger = logging.getLogger("storage_s3.cli")


def _guess_content_type(path: Path) -> str:
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or DEFAULT_CONTENT_TYPE


def put_file(storage: FileStorage, path: Path, key: str, content_type: str | None) -> None:
    content_type = content_type or _guess_content_type(path)
    with path.open("rb") as fh:
        stored = storage.save(fh, key, content_type, path.stat().st_size)
    logger.info("stored %s as %s at %s", path, stored.key, stored.stored_at.isoformat())


def get_file(storage: FileStorage, key: str, output: Path | None) -> None:
    body = storage.read_stream(key)
    try:
        if output is None:
            shutil.copyfileobj(body, sys.stdout.buffer)
            sys.stdout.buffer.flush()
        else:
            with output.open("wb") as fh:
                shutil.copyfileobj(body, fh)
            logger.info("wrote %s to %s", key, output)
    finally:
        body.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage files in object storage")
    parser.add_argument(
        "--dsn",
        default=None,
        help="Storage DSN (default: STORAGE_DSN setting)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    put = sub.add_parser("put", help="Upload a local file")
    put.add_argument("path", type=Path)
    put.add_argument("key")
    put.add_argument(
        "--content-type",
        default=None,
        help="MIME type (default: guessed from the file name)",
    )

    get = sub.add_parser("get", help="Download a file")
    get.add_argument("key")
    get.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Destination file (default: stdout)",
    )

    rm = sub.add_parser("rm", help="Delete a file")
    rm.add_argument("key")

    exists = sub.add_parser("exists", help="Exit 0 if the file exists, 1 otherwise")
    exists.add_argument("key")

    url = sub.add_parser("url", help="Print a temporary download URL")
    url.add_argument("key")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    dsn = args.dsn or settings.STORAGE_DSN
    if not dsn:
        logger.error("No storage configured: pass --dsn or set STORAGE_DSN")
        return 2

    try:
        storage = create_storage(dsn)
        if args.command == "put":
            put_file(storage, args.path, args.key, args.content_type)
        elif args.command == "get":
            get_file(storage, args.key, args.output)
        elif args.command == "rm":
            storage.delete(args.key)
            logger.info("deleted %s", args.key)
        elif args.command == "exists":
            found = storage.exists(args.key)
            print("yes" if found else "no")
            return 0 if found else 1
        elif args.command == "url":
            print(storage.url(args.key))
    except (StorageError, BotoCoreError, ClientError, OSError) as exc:
        logger.error("%s", exc)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
