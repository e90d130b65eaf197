"""Token-safe structured logging for the ``tgfetch`` logger hierarchy.

Bot API URLs embed the bot token (``/bot<token>/<method>``), and transport
errors raised by :mod:`requests` quote that URL verbatim.  Everything the
client logs goes through :func:`redact` first, and handlers installed by
:func:`configure_logging` carry a :class:`RedactingFilter` as a second line,
so records from application code that log a caught exception are scrubbed
as well.

Usage::

    from tgfetch.logger import configure_logging

    configure_logging(logging.DEBUG, log_file="logs/bot.log")
"""

import json
import logging
import os
import re
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import List, Optional

ROOT_LOGGER_NAME = "tgfetch"

# Bot API tokens look like "<bot id>:<secret>".
_TOKEN_PATTERN = re.compile(r"(\d{3,}:[A-Za-z0-9_-]{10,})")

_LOG_FILE_MAX_BYTES = 2 * 1024 * 1024
_LOG_FILE_BACKUPS = 3

# Client fields first, in this order, when present on a record.
_CLIENT_FIELDS = ("api_endpoint", "encoding", "status_code", "ok", "bot_token", "error_code", "error")

_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

_installed_handlers: List[logging.Handler] = []

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def mask_token(token: str) -> str:
    """Return ``abc...xyz`` (first and last three characters) for logs."""
    if len(token) < 10:
        return "***"
    return f"{token[:3]}...{token[-3:]}"


def redact(text: str) -> str:
    """Replace every bot token found in *text* with its masked form."""
    return _TOKEN_PATTERN.sub(lambda match: mask_token(match.group(1)), text)


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the ``tgfetch`` hierarchy."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


class RedactingFilter(logging.Filter):
    """Scrub bot tokens from the message, its arguments and string extras."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact(record.getMessage())
        record.args = None
        for key, value in list(vars(record).items()):
            if key not in _RECORD_ATTRS and isinstance(value, str):
                setattr(record, key, redact(value))
        if record.exc_info and not record.exc_text:
            record.exc_text = redact(logging.Formatter().formatException(record.exc_info))
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record, client fields before any other extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        for key in _CLIENT_FIELDS:
            if key in extras:
                entry[key] = extras.pop(key)
        entry.update(sorted(extras.items()))
        if record.exc_info or record.exc_text:
            entry["exception"] = record.exc_text or self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Send ``tgfetch`` records to stderr (and *log_file*) as redacted JSON.

    Calling it again replaces the handlers installed by the previous call.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    reset_logging()
    root.setLevel(level)

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handlers.append(
            RotatingFileHandler(log_file, maxBytes=_LOG_FILE_MAX_BYTES, backupCount=_LOG_FILE_BACKUPS, encoding="utf-8")
        )
    for handler in handlers:
        handler.setLevel(level)
        handler.addFilter(RedactingFilter())
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)
        _installed_handlers.append(handler)
    return root


def reset_logging() -> None:
    """Undo :func:`configure_logging`: close its handlers and clear the level."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    while _installed_handlers:
        handler = _installed_handlers.pop()
        handler.close()
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


def describe_error(exc: BaseException) -> str:
    """A log-safe one-line description of *exc*."""
    return redact(f"{type(exc).__name__}: {exc}")
