from __future__ import annotations

import os

import pytest

# Keep boto3 away from real credentials and endpoints.
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ.pop("STORAGE_DSN", None)
os.environ.setdefault("ENABLE_METRICS", "true")

from storage_s3.common.config import get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def reset_settings():
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture
def s3_options() -> dict[str, str]:
    return {"bucket": "test-bucket", "region": "us-east-1"}
