import json
import logging
from logging.config import dictConfig
from typing import Any, Mapping

SENSITIVE_OPTIONS = {"key", "access_key", "secret", "secret_key"}


def setup_logging(level: str = "INFO") -> None:
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": JsonFormatter,
                },
                "plain": {
                    "format": "%(levelname)s %(name)s: %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                },
                "cli_console": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                },
            },
            "root": {
                "level": level,
                "handlers": ["console"],
            },
            "loggers": {
                "storage_s3.cli": {
                    "handlers": ["cli_console"],
                    "level": level,
                    "propagate": False,
                }
            },
        }
    )


def mask_options(options: Mapping[str, Any]) -> dict[str, Any]:
    """Copy ``options`` with credential values replaced by ``***``."""
    return {
        k: "***" if k.lower() in SENSITIVE_OPTIONS else v for k, v in options.items()
    }


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "extra") and isinstance(record.extra, dict):
            payload.update(record.extra)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)
