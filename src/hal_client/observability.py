from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx

# attributes every LogRecord already carries; extras must not collide with them
RESERVED_LOG_KEYS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


def log_event(event: str, logger: logging.Logger | None = None, **fields: Any) -> None:
    """
    Emit one INFO record named after the event.
    Fields become record attributes (for LogfmtFormatter and caplog); names
    that clash with LogRecord attributes are dropped.
    """
    log = logger or logging.getLogger("hal_client.observability")
    extra = {k: v for k, v in fields.items() if k not in RESERVED_LOG_KEYS}
    extra["event"] = event
    log.info(event, extra=extra)


def log_exchange(
    request: httpx.Request,
    started: float,
    *,
    status: int | str,
    logger: logging.Logger | None = None,
    error: Optional[BaseException] = None,
) -> None:
    """Emit one hal_request event for a finished (or failed) HTTP exchange."""
    fields: Dict[str, Any] = {
        "method": request.method,
        "url": str(request.url),
        "status": status,
        "duration_ms": int((time.perf_counter() - started) * 1000),
    }
    if error is not None:
        fields["error_type"] = type(error).__name__
    log_event("hal_request", logger, **fields)


__all__ = ["log_event", "log_exchange", "RESERVED_LOG_KEYS"]
