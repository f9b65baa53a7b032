from __future__ import annotations

import json
import logging
import textwrap
from datetime import datetime, timezone

_CONTEXT_FIELDS = ("step", "precondition", "alternative", "path", "command")


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logs with stable keys."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Optional contextual fields
        for name in _CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                data[name] = value
        report = getattr(record, "report", None)
        if isinstance(report, dict):
            data["report"] = report

        return json.dumps(data, ensure_ascii=False)


class OperatorFormatter(logging.Formatter):
    """Plain text for a terminal; wraps long messages at ``width`` columns."""

    def __init__(self, width: int = 80) -> None:
        super().__init__()
        self._width = width

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno >= logging.WARNING:
            message = f"{record.levelname}: {message}"
        return textwrap.fill(
            message,
            width=self._width,
            break_long_words=False,
            break_on_hyphens=False,
        )


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Configure global logging for the installer; idempotent-ish."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # Avoid duplicate handlers if setup is called multiple times
    if any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    formatter: logging.Formatter = (
        StructuredFormatter() if fmt == "json" else OperatorFormatter()
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return module logger."""
    return logging.getLogger(name)
