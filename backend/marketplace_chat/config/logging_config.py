import logging
from logging.handlers import RotatingFileHandler
import io
import sys
from pathlib import Path
from contextvars import ContextVar, Token
from typing import Optional

from marketplace_chat.config.settings import Config

NO_CORRELATION_ID = "NO Correlation ID"
CORRELATION_ID_HEADER = "X-Correlation-ID"

# Correlation ID of the HTTP request or WebSocket connection being served
correlation_id_var: ContextVar[str] = ContextVar(
    "correlation_id", default=NO_CORRELATION_ID
)

# Drivers that log every query/frame at INFO
_QUIET_LOGGERS = ("prisma", "redis", "websockets", "uvicorn.access")

_HANDLER_MARKER = "_marketplace_chat_handler"


def bind_correlation_id(correlation_id: Optional[str]) -> Token:
    """Set the correlation ID for the current context; returns the reset token."""
    return correlation_id_var.set(correlation_id or NO_CORRELATION_ID)


class CorrelationIdFilter(logging.Filter):
    """Logging filter to add correlation ID to log records."""

    def filter(self, record):
        record.correlation_id = correlation_id_var.get()
        return True


class SafeFormatter(logging.Formatter):
    """Formatter that ensures correlation_id always exists."""

    def format(self, record):
        if not hasattr(record, "correlation_id"):
            record.correlation_id = NO_CORRELATION_ID
        return super().format(record)


def _mark(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_MARKER, True)
    handler.addFilter(CorrelationIdFilter())
    return handler


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure the root logger once per process.

    Calling it again replaces the handlers it installed earlier, so reloads
    do not duplicate every line.
    """
    root = logging.getLogger()
    root.setLevel(logging.WARNING)
    for handler in [h for h in root.handlers if getattr(h, _HANDLER_MARKER, False)]:
        root.removeHandler(handler)

    formatter = SafeFormatter(Config.LOG_FORMAT)
    stream_handler = logging.StreamHandler(
        io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", line_buffering=True)
    )
    stream_handler.setFormatter(formatter)
    root.addHandler(_mark(stream_handler))

    # Set up file logging if log_file provided with rotation
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5
        )
        file_handler.setFormatter(formatter)
        root.addHandler(_mark(file_handler))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("marketplace_chat").setLevel(
        getattr(logging, level.upper(), logging.INFO)
    )
    logging.getLogger(__name__).info(f"Logging is set up: level={level}, log_file={log_file}")

    return root
