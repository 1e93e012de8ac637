from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


@dataclass
class Settings:
    STORAGE_DSN: str | None = None
    LOG_LEVEL: str = "INFO"
    ENABLE_METRICS: bool = True

    def __post_init__(self) -> None:
        self.LOG_LEVEL = self.LOG_LEVEL.strip().upper()
        if self.LOG_LEVEL not in LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {self.LOG_LEVEL!r}."
            )

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            STORAGE_DSN=os.environ.get("STORAGE_DSN") or None,
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL),
            ENABLE_METRICS=_as_bool(
                os.environ.get("ENABLE_METRICS"), cls.ENABLE_METRICS
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
