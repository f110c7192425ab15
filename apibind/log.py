"""
Structured logging for bound handlers.

Internal errors are logged once, with the original exception attached and the
request fields below as record attributes, so any formatter can pick them up.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from msgspec.json import encode as json_encode

from apibind.context import Context
from apibind.vendors import Request

LOGGER_NAME = "apibind"

REQUEST_FIELDS = (
    "request_id",
    "http_method",
    "http_path",
    "user_agent",
    "remote_addr",
)


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def request_fields(req: Request, ctx: Context | None = None) -> dict[str, Any]:
    client = req.client
    return {
        "request_id": ctx.request_id if ctx else req.headers.get("x-request-id"),
        "http_method": req.method,
        "http_path": req.url.path,
        "user_agent": req.headers.get("user-agent", ""),
        "remote_addr": f"{client.host}:{client.port}" if client else "",
    }


def log_internal_error(
    logger: logging.Logger,
    exc: BaseException,
    req: Request,
    ctx: Context | None = None,
) -> None:
    logger.error(
        "internal error: %s",
        exc,
        exc_info=(type(exc), exc, exc.__traceback__),
        extra=request_fields(req, ctx),
    )


class JSONFormatter(logging.Formatter):
    """Format records as one json object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in REQUEST_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json_encode(log).decode()


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure the apibind logger, called once on startup."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    logger = get_logger()
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
