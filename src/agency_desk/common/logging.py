"""Structured logging setup.

Every record passes through ``redact_secrets`` so credentials never reach a
log sink, and carries the tenant bound with ``bind_tenant``.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from agency_desk.common.config import LoggingConfig

SENSITIVE_KEYS = frozenset({"password", "new_password", "password_hash", "api_key"})
REDACTED = "***"

# Libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore")


def redact_secrets(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask the values of credential keys."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def bind_tenant(tenant_id: str, actor: str | None = None) -> None:
    """Attach the signed-in tenant to every subsequent log record."""
    structlog.contextvars.bind_contextvars(tenant_id=tenant_id, actor=actor)


def clear_tenant() -> None:
    """Drop the tenant bound by ``bind_tenant``."""
    structlog.contextvars.unbind_contextvars("tenant_id", "actor")


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure structured logging.

    Args:
        config: Logging configuration. Uses defaults if not provided.
    """
    if config is None:
        config = LoggingConfig()
    level = getattr(logging, config.level.upper())

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if config.format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    # stdout is reserved for report output of the scripts
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))
    for handler in handlers:
        handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = handlers
    root_logger.setLevel(level)

    logging.getLogger("agency_desk").setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name. Defaults to 'agency_desk'.

    Returns:
        Bound logger instance.
    """
    return structlog.get_logger(name or "agency_desk")
