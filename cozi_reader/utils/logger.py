"""
Logging configuration

All modules obtain their logger through ``setup_logger(__name__)``. The
structlog pipeline is configured once per process by ``configure_logging``;
later calls only change the level or add a file handler.
"""
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

# Event keys whose values must never reach a log sink
REDACTED_KEYS = frozenset({"password", "access_token", "accessToken", "authorization", "token"})

_configured_level: Optional[int] = None


def redact_secrets(_logger: Any, _method: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """structlog processor that masks credential-bearing keys."""
    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure stdlib logging and structlog for the process.

    Args:
        level: Log level name (DEBUG, INFO, ...)
        log_file: Optional path of a file that receives a copy of every record
    """
    global _configured_level

    log_level = getattr(logging, level.upper())

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=handlers,
        force=_configured_level is not None
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            redact_secrets,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False
    )
    _configured_level = log_level


def setup_logger(
    name: Optional[str] = None,
    level: Optional[str] = None,
    log_file: Optional[str] = None
) -> structlog.BoundLogger:
    """
    Return a structured logger for ``name``.

    The first call configures logging with INFO (or ``level``); passing
    ``level`` or ``log_file`` later reconfigures the process.
    """
    if _configured_level is None or level or log_file:
        configure_logging(level or "INFO", log_file)

    return structlog.get_logger(name)
