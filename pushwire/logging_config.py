"""
Tool: Logging Configuration
Purpose: Route pushwire's log records through structlog

pushwire is a library, so it never configures logging on import. Lower-level
modules log through ``logging.getLogger(__name__)``; ``send_push`` emits
key/value events (``push_delivered``, ``push_rejected``,
``push_transport_error``) through ``get_logger``. Whoever owns the process
(the ``pushwire`` CLI, or the host application) calls ``setup_logging()``
once, and both kinds of record come out in one format: JSON lines when
``PUSHWIRE_LOG_FORMAT=json``, readable console lines otherwise.

Environment:
    PUSHWIRE_LOG_LEVEL    DEBUG | INFO | WARNING | ERROR (default INFO)
    PUSHWIRE_LOG_FORMAT   "json" for JSON lines

Usage:
    from pushwire.logging_config import setup_logging
    setup_logging()
"""

from __future__ import annotations

import logging
import os
import sys

import structlog


# Event keys that must never reach a log sink, whoever passes them
REDACTED_KEYS = frozenset({"private_key", "auth", "auth_secret", "cek", "nonce", "payload"})


def _drop_secrets(logger, method_name, event_dict):
    for key in REDACTED_KEYS & event_dict.keys():
        event_dict[key] = "[redacted]"
    return event_dict


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _drop_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _build_handler(pre_chain: list[structlog.types.Processor], json_output: bool) -> logging.Handler:
    """A stderr handler rendering both structlog and plain stdlib records."""
    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """
    Install a single structlog-rendered handler on the root logger.

    Safe to call more than once; the previous root handlers are replaced.

    Args:
        level: Level name; defaults to PUSHWIRE_LOG_LEVEL, unknown names mean INFO
        json_output: Force JSON (True) or console (False) rendering; defaults
            to PUSHWIRE_LOG_FORMAT
    """
    if level is None:
        level = os.environ.get("PUSHWIRE_LOG_LEVEL", "INFO")
    if json_output is None:
        json_output = os.environ.get("PUSHWIRE_LOG_FORMAT", "").lower() == "json"

    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_build_handler(pre_chain, json_output))
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["get_logger", "setup_logging"]
