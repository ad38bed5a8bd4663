# backend/logging_setup.py

import logging
import sys
import time

from fastapi import Request

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

request_logger = logging.getLogger("taskmanager.requests")


class _LibraryNoiseFilter(logging.Filter):
    """Keep third-party chatter (passlib, httpx) at WARNING and above."""

    QUIET_PREFIXES = ("passlib", "httpx", "httpcore")

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(self.QUIET_PREFIXES):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(level: str = "INFO") -> None:
    """
    Install a single stderr handler on the root logger.

    Safe to call more than once: existing handlers are replaced.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(_LibraryNoiseFilter())
    root.addHandler(handler)

    logging.captureWarnings(True)


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    request_logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response
