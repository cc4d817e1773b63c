"""Log setup for the sievedir CLI.

The store and compiler modules log through plain ``logging.getLogger(__name__)``
loggers; this module routes those records through structlog so they share one
format on stderr.
"""

import logging
import sys

import structlog


def configure_logging(level: str, json_output: bool | None = None) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: Level name; unknown names fall back to INFO.
        json_output: Render JSON lines. Defaults to on when APP_ENV is "prod".
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if json_output is None:
        import os
        json_output = os.environ.get("APP_ENV", "dev") == "prod"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Records from plain logging.getLogger() loggers go through the same chain.
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)


def bind_context(**kwargs: object) -> None:
    """Attach fields such as the repository path to every later log line."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop the fields added by bind_context()."""
    structlog.contextvars.clear_contextvars()
