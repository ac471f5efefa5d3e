import os
import logging
from logging.handlers import RotatingFileHandler
from typing import List, Optional, Set
import structlog
from structlog.stdlib import ProcessorFormatter, BoundLogger, add_logger_name
from structlog.processors import (
    JSONRenderer,
    TimeStamper,
    add_log_level,
    StackInfoRenderer,
    format_exc_info,
)
from rich.logging import RichHandler
from structlog.dev import ConsoleRenderer

LOGGER_NAME = "centerpane"

LOG_FILE_PATH = os.path.join(
    os.environ.get("XDG_STATE_HOME") or os.path.expanduser("~/.local/state"),
    LOGGER_NAME,
    "centerpane.log",
)

LOG_FILE_MAX_BYTES = 512 * 1024
LOG_FILE_BACKUPS = 3


class SpamFilter(logging.Filter):
    """
    Collapses bursts of repetitive messages.

    A message starting with one of ``NOISY_PREFIXES`` passes once; repeats
    are dropped until any other message is logged.
    """

    NOISY_PREFIXES = (
        "Configuration reloaded",
        "Configuration file modified",
        "Change event received",
    )

    def __init__(self):
        super().__init__()
        self._seen: Set[str] = set()

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if not message.startswith(self.NOISY_PREFIXES):
            self._seen.clear()
            return True
        if message in self._seen:
            return False
        self._seen.add(message)
        return True


def _shared_processors() -> List:
    return [
        add_log_level,
        TimeStamper(fmt="iso", utc=False),
        StackInfoRenderer(),
        format_exc_info,
    ]


def _json_file_handler(log_file: str, level: int) -> logging.Handler:
    os.makedirs(os.path.dirname(log_file), exist_ok=True)
    handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=_shared_processors() + [add_logger_name],
            processor=JSONRenderer(),
        )
    )
    return handler


def _rich_console_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_path=False,
        show_time=False,
    )
    handler.setLevel(level)
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processor=ConsoleRenderer(colors=False),
            fmt="%(message)s",
        )
    )
    return handler


def setup_logging(
    level: int = logging.DEBUG, log_file: Optional[str] = LOG_FILE_PATH
) -> BoundLogger:
    """
    Route structlog through the ``centerpane`` stdlib logger: JSON lines to a
    rotating file and a rich console. ``log_file=None`` keeps only the console.
    """
    structlog.configure(
        processors=_shared_processors()
        + [add_logger_name, ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    root.propagate = False
    for old_handler in list(root.handlers):
        root.removeHandler(old_handler)
        old_handler.close()
    handlers = [_rich_console_handler(level)]
    if log_file:
        handlers.append(_json_file_handler(log_file, level))
    spam_filter = SpamFilter()
    for handler in handlers:
        handler.addFilter(spam_filter)
        root.addHandler(handler)
    return structlog.get_logger(LOGGER_NAME)


def set_log_level(level: int) -> None:
    """Change the level of the centerpane logger and all of its handlers."""
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)
