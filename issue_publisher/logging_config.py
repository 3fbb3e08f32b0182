from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog
from structlog.typing import Processor

from issue_publisher.config import PublisherSettings

LOGGER_NAME = "issue_publisher"
LOG_FILE_NAME = "issue-publisher.log"

_TIMESTAMPER = structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp")


def configure_logging(settings: PublisherSettings) -> Path | None:
    """Send `issue_publisher.*` records to stderr, and to a JSON file when `log_dir` is set.

    Plain `logging` records and structlog events go through the same formatter chain,
    so values bound with `structlog.contextvars` (the event path during a run) are
    attached to both. Returns the log file path, if any.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _TIMESTAMPER,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.getLevelNamesMapping().get(settings.log_level.strip().upper(), logging.INFO))
    console.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=_is_terminal(sys.stderr))))
    logger.addHandler(console)

    if settings.log_dir is None:
        return None

    settings.log_dir.mkdir(parents=True, exist_ok=True)
    log_file = settings.log_dir / LOG_FILE_NAME
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        _formatter(
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        )
    )
    logger.addHandler(file_handler)
    logger.debug("log file opened path=%s", log_file)
    return log_file


def _formatter(*renderers: Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _TIMESTAMPER,
        ],
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    )


def _is_terminal(stream: object) -> bool:
    isatty = getattr(stream, "isatty", None)
    try:
        return callable(isatty) and bool(isatty())
    except ValueError:
        return False
