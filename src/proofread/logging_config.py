"""Application logging configuration utilities."""

from __future__ import annotations

import dataclasses
import enum
import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

AUDIT_LOGGER_NAME = "proofread.audit"

# Keys emitted by ``telemetry.log_event`` that lead every line when present.
_LEADING_KEYS = ("step", "session_id", "checker", "suggestion_id")


def _json_default(value: Any) -> Any:
    """Render suggestion kinds, dataclasses and kind sets instead of their repr."""

    if isinstance(value, enum.Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(_json_default(item) if isinstance(item, enum.Enum) else item for item in value)
    return str(value)


class MinimalJSONFormatter(logging.Formatter):
    """Serialize log records to one JSON object per line.

    Dict messages (the ``log_event`` schema and audit records) are merged into
    the line. Their ``details`` mapping is flattened so nested checker and pass
    statistics stay greppable; a detail never overwrites a top-level key.
    """

    _RESERVED_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "taskName"}

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - inherited
        timestamp = (
            datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z")
        )

        log_record: dict[str, Any] = {
            "ts": timestamp,
            "level": record.levelname,
            "module": record.name,
        }

        fields: dict[str, Any] = {}
        if isinstance(record.msg, dict):
            fields.update(record.msg)
        else:
            message = record.getMessage()
            if message:
                fields["message"] = message

        for key, value in record.__dict__.items():
            if key in self._RESERVED_KEYS or key.startswith("_"):
                continue
            fields.setdefault(key, value)

        details = fields.pop("details", None)
        for key in _LEADING_KEYS:
            if key in fields:
                log_record[key] = fields.pop(key)
        log_record.update(fields)
        if isinstance(details, dict):
            for key, value in details.items():
                log_record.setdefault(key, value)
        elif details is not None:
            log_record["details"] = details

        if record.exc_info and "exc" not in log_record:
            log_record["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_record, ensure_ascii=False, default=_json_default)


def configure_logging(log_dir: str | Path | None = None) -> None:
    """Configure JSON logging to stderr plus a file-backed audit trail of user actions."""

    directory = Path(log_dir or os.getenv("PROOFREAD_LOG_DIR", "logs"))
    directory.mkdir(parents=True, exist_ok=True)
    level = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"json": {"()": MinimalJSONFormatter}},
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                },
                "audit": {
                    "class": "logging.FileHandler",
                    "filename": str(directory / "suggestion_audit.log"),
                    "mode": "a",
                    "encoding": "utf-8",
                    "formatter": "json",
                },
            },
            "root": {
                "level": level,
                "handlers": ["default"],
            },
            "loggers": {
                AUDIT_LOGGER_NAME: {
                    "level": "INFO",
                    "handlers": ["audit"],
                    "propagate": False,
                }
            },
        }
    )
