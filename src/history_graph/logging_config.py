"""structlog logging setup shared by the CLI and library callers.

Routes ``structlog.get_logger()`` events and plain stdlib records (SQLAlchemy,
aiosqlite) through one formatter so a pipeline run reads as a single stream,
rendered as JSON lines or as a coloured console view.
"""

import logging
import sys

import structlog

# Driver loggers that are chatty at INFO when a history database is opened.
_NOISY_LOGGERS = ("aiosqlite", "sqlalchemy.engine")


def configure_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """Install the structlog processor chain and the root stdlib handler.

    Records from stdlib loggers, notably ``aiosqlite`` and
    ``sqlalchemy.engine`` when a Chromium history database is read, go
    through the same formatter as structlog events.  Those two loggers are
    held at WARNING whatever ``log_level`` is.

    Args:
        json_output: Render JSON lines instead of the console renderer.
        log_level: Root level name (``"DEBUG"``, ``"INFO"``, ...).
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # stderr keeps stdout free for command output
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper()))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
