"""Logging setup for the identity document scanner.

One stdout handler on the root logger, quiet HTTP client loggers, and a
request-scoped adapter so every line of one scan can be correlated.
"""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

# httpx logs every request line at INFO, including the API key query string.
_NOISY_LOGGERS = ("httpx", "httpcore", "PIL")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class RequestLogAdapter(logging.LoggerAdapter):
    """Prefix log messages with the id of the scan request they belong to."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['request_id']}] {msg}", kwargs


def setup_logging(level: str = "INFO") -> None:
    """Send log records to stdout in the scanner's line format.

    A second call only adjusts the level; handlers installed earlier, by
    this function or by a host such as uvicorn, are left in place.

    Args:
        level: Level name; unknown names fall back to INFO.
    """
    root = logging.getLogger()
    root.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger instance.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.

    Returns:
        The module logger; handlers live on the root logger only.
    """
    return logging.getLogger(name)


def get_request_logger(name: str, request_id: str) -> RequestLogAdapter:
    """Get a logger that tags every message with a scan request id.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.
        request_id: Identifier of the scan request.

    Returns:
        Adapter around the named logger.
    """
    return RequestLogAdapter(logging.getLogger(name), {"request_id": request_id})
