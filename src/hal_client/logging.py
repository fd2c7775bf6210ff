import logging
from typing import IO, Any, Optional, Sequence

LOG_EXTRA_FIELDS = (
    "method",
    "url",
    "status",
    "duration_ms",
    "location",
    "redirects",
    "error_type",
    "rel",
    "href",
)


def _logfmt_value(val: Any) -> str:
    if isinstance(val, bool):
        return "true" if val else "false"
    if isinstance(val, (int, float)):
        return str(val)
    text = str(val)
    if not text or any(c in text for c in ' ="'):
        return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return text


class LogfmtFormatter(logging.Formatter):
    """Renders records as logfmt: level, logger, event, then the known extras that are set."""

    def __init__(self, fields: Sequence[str] = LOG_EXTRA_FIELDS):
        super().__init__()
        self.fields = tuple(fields)

    def format(self, record: logging.LogRecord) -> str:
        pairs: list[tuple[str, Any]] = [
            ("level", record.levelname.lower()),
            ("logger", record.name),
        ]

        event = record.getMessage()
        if event:
            pairs.append(("event", event))

        pairs.extend(
            (key, getattr(record, key))
            for key in self.fields
            if getattr(record, key, None) is not None
        )

        if record.exc_info and record.exc_info[0] is not None:
            pairs.append(("exc_type", record.exc_info[0].__name__))

        return " ".join(f"{key}={_logfmt_value(val)}" for key, val in pairs)


def setup_logging(
    level: str = "INFO",
    *,
    stream: Optional[IO[str]] = None,
    logger_name: Optional[str] = None,
) -> logging.Handler:
    """
    Attach a single logfmt stream handler and return it.
    Configures the root logger unless logger_name is given (e.g. "hal_client"
    to scope output to client events). Existing handlers on that logger are
    replaced, so repeated calls do not duplicate output.
    """
    target = logging.getLogger(logger_name)
    for h in list(target.handlers):
        target.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(LogfmtFormatter())
    target.addHandler(handler)
    target.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler


__all__ = ["setup_logging", "LogfmtFormatter", "LOG_EXTRA_FIELDS"]
