"""structlog configuration for the session service."""

import logging
import sys

import structlog
from structlog.stdlib import BoundLogger
from structlog.typing import Processor

from deckchat.config.models import LoggingConfig

# Libraries whose INFO output drowns the session log
NOISY_LOGGERS = ("aiosqlite", "sqlalchemy.engine", "aiohttp.access")


def _pre_chain() -> list[Processor]:
    # Applied to structlog and plain stdlib records alike
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _stdout_handler(level: int, log_format: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )
    return handler


def setup_logging(config: LoggingConfig) -> None:
    """Route structlog and stdlib logging to stdout.

    Replaces any handler already on the root logger, so calling it again
    reconfigures instead of duplicating output.

    Args:
        config: Level and output format (``json`` or ``text``).
    """
    level = logging.getLevelName(config.level)

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(_stdout_handler(level, config.format))
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            *_pre_chain(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def bind_identity(identity: str) -> None:
    """Attach the active identity to every subsequent log entry."""
    structlog.contextvars.bind_contextvars(identity=identity)


def get_logger(name: str | None = None) -> BoundLogger:
    """Return a structlog logger, usually named after the calling module."""
    return structlog.stdlib.get_logger(name)
