"""Root logger setup for the mentor-buddy API.

One stdout handler, two renderings:

  text (default) -- ``<time> <LEVEL> <logger> [req=<id>]  <message>``.
    Warnings and errors also carry ``[file:line]`` so a rejected workflow
    transition or a 403 points straight at the guard that raised it.

  json (LOG_JSON=true) -- one object per line; request context attributes
    set by RequestContextMiddleware become top-level keys.

Bearer tokens (user JWTs and the cron secret) and password fields are
masked before either rendering sees the message.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from contextvars import ContextVar

REQUEST_FIELDS = ("request_id", "method", "path", "user_id", "status_code", "duration_ms")

_TIMESTAMP_FMT = "%Y-%m-%dT%H:%M:%S%z"
_BEARER = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE)
_PASSWORD = re.compile(
    r"""((?:current|new|confirm)?_?password['"]?\s*[:=]\s*['"]?)[^\s,'"}]+""",
    re.IGNORECASE,
)
_QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "httpcore", "httpx")

# Set per request by RequestContextMiddleware; "-" outside a request.
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


def redact(text: str) -> str:
    text = _BEARER.sub(r"\1[REDACTED]", text)
    return _PASSWORD.sub(r"\1[REDACTED]", text)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        return True


class RedactSecretsFilter(logging.Filter):
    """Rewrites the record's message with secrets masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg, record.args = cleaned, ()
        return True


def _timestamp(formatter: logging.Formatter, record: logging.LogRecord) -> str:
    stamp = logging.Formatter.formatTime(formatter, record, _TIMESTAMP_FMT)
    # milliseconds go before the UTC offset
    return f"{stamp[:-5]}.{int(record.msecs):03d}{stamp[-5:]}"


class _ContainerFormatter(logging.Formatter):
    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return _timestamp(self, record)

    def format(self, record: logging.LogRecord) -> str:
        parts = [self.formatTime(record), f"{record.levelname:<8}", record.name]
        request_id = getattr(record, "request_id", None)
        if request_id and request_id != "-":
            parts.append(f"[req={request_id}]")
        line = " ".join(parts) + "  " + record.getMessage()
        if record.levelno >= logging.WARNING:
            line += f"  [{record.filename}:{record.lineno}]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class _JsonFormatter(logging.Formatter):
    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return _timestamp(self, record)

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key))
            for key in REQUEST_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Install the stdout handler on the root logger.

    Unknown level names fall back to INFO.  Server and HTTP client
    libraries are held at WARNING or above.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())
    handler.addFilter(RequestIdFilter())
    handler.addFilter(RedactSecretsFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
