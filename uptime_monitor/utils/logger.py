"""Process-wide logging for the worker: stdlib handlers with JSON or text output."""

import logging
import sys
from pathlib import Path
from typing import List, Optional
import structlog
from pythonjsonlogger import jsonlogger


TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
JSON_FORMAT = '%(timestamp)s %(levelname)s %(name)s %(message)s'

# Third-party loggers that log every request or job run at INFO
NOISY_LOGGERS = ("apscheduler", "aiohttp.access")


def _formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return jsonlogger.JsonFormatter(JSON_FORMAT, timestamp=True)
    return logging.Formatter(TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')


def _handlers(log_format: str, log_file: Optional[str], console: bool) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if console:
        handlers.append(logging.StreamHandler(sys.stdout))

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(_formatter(log_format))
    return handlers


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    console: bool = True
) -> None:
    """
    Configure logging for the worker process.

    Replaces any root handlers installed earlier. Context passed through
    ``extra={...}`` becomes top-level keys of each JSON line. structlog
    loggers are routed through the same handlers, with bound values
    rendered as ``extra``.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" or "text"
        log_file: Optional path of a log file, parent directories are created
        console: Whether to log to stdout

    Example:
        ```python
        setup_logging(level="INFO", log_format="json")
        logger = get_logger(__name__)
        logger.info("Check cycle started", extra={"count": 12})
        ```
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        handlers=_handlers(log_format, log_file, console),
        force=True
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> logging.Logger:
    """Return the stdlib logger for a module (pass ``__name__``)."""
    return logging.getLogger(name)
