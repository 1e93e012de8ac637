import json
import logging
import sys
from unittest.mock import MagicMock, patch

from storage_s3.common.logging import JsonFormatter, mask_options
from storage_s3.infra.storage.s3_storage import S3Storage


def _record(msg: str, *args, extra=None, exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="storage_s3.infra.storage.s3_storage",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )
    if extra is not None:
        record.extra = extra
    return record


def test_json_formatter_merges_extra_payload():
    record = _record(
        "s3 %s bucket=%s key=%s",
        "save",
        "b",
        "photos/a.jpg",
        extra={"operation": "save", "key": "photos/a.jpg", "size_bytes": 3},
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "DEBUG"
    assert payload["logger"] == "storage_s3.infra.storage.s3_storage"
    assert payload["message"] == "s3 save bucket=b key=photos/a.jpg"
    assert payload["operation"] == "save"
    assert payload["size_bytes"] == 3


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record("failed", exc_info=sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))

    assert "RuntimeError: boom" in payload["exception"]


def test_mask_options_hides_credentials():
    masked = mask_options(
        {
            "bucket": "b",
            "region": "r",
            "key": "AKIA",
            "secret": "shh",
            "access_key": "AKIA2",
            "secret_key": "shh2",
        }
    )

    assert masked == {
        "bucket": "b",
        "region": "r",
        "key": "***",
        "secret": "***",
        "access_key": "***",
        "secret_key": "***",
    }


def test_storage_construction_log_masks_secrets(caplog):
    with patch.object(S3Storage, "_build_client", return_value=MagicMock()):
        with caplog.at_level(logging.DEBUG, logger="storage_s3.infra.storage.s3_storage"):
            S3Storage({"bucket": "b", "region": "r", "key": "AKIA", "secret": "shh"})

    [record] = [r for r in caplog.records if "configured" in r.getMessage()]
    assert record.extra["options"]["secret"] == "***"
    assert "shh" not in json.dumps(record.extra)
