import logging

import structlog

from sievedir.logging import bind_context, clear_context, configure_logging


def test_configure_logging_installs_single_stderr_handler() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging("debug", json_output=True)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        structlog.reset_defaults()


def test_unknown_level_falls_back_to_info() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging("chatty", json_output=False)
        assert root.level == logging.INFO
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        structlog.reset_defaults()


def test_bind_and_clear_context() -> None:
    clear_context()
    bind_context(sievedir="/tmp/sieve")
    assert structlog.contextvars.get_contextvars() == {"sievedir": "/tmp/sieve"}
    clear_context()
    assert structlog.contextvars.get_contextvars() == {}
