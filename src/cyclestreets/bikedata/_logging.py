import logging
import sys

import orjson

_RESERVED = frozenset(
    (
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
        "module", "lineno", "funcName", "created", "msecs", "relativeCreated",
        "thread", "threadName", "processName", "process", "exc_info", "exc_text",
        "stack_info", "taskName", "message",
    )
)


class JSONFormatter(logging.Formatter):
    """Serialise log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extra fields passed via `extra=`
        for key, value in record.__dict__.items():
            if key not in _RESERVED:
                log_data[key] = value

        return orjson.dumps(log_data, default=str).decode()


def setup_logging(level: str = "INFO", stream=None) -> logging.Logger:
    """Attach a JSON handler to the package logger.

    Only the ``cyclestreets.bikedata`` logger is configured so a notebook's own
    logging setup is left alone. Calling it again replaces the handler.

    Args:
        level: Level name, e.g. ``"DEBUG"``.
        stream: Output stream; defaults to stdout.

    Returns:
        The configured package logger.
    """
    package_logger = logging.getLogger("cyclestreets.bikedata")
    package_logger.setLevel(getattr(logging, level.upper()))

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter())
    package_logger.addHandler(handler)
    return package_logger
