"""Structured logging (structlog) for the API and the report pipeline."""

import logging
import sys
from typing import Any

import structlog

from stoneledger.core.config import settings

_SENSITIVE_KEYS = frozenset({
    "password",
    "secret",
    "client_secret",
    "token",
    "access_token",
    "refresh_token",
    "authorization",
    "api_key",
    "database_url",
})


def redact_secrets(_logger: Any, _method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask values of credential keys. Matches whole key names only."""
    for key in list(event_dict):
        if key.lower() in _SENSITIVE_KEYS:
            event_dict[key] = "[REDACTED]"
    return event_dict


def setup_logging() -> None:
    base_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        redact_secrets,
    ]

    if settings.debug:
        processors = base_processors + [structlog.dev.ConsoleRenderer()]
        min_level = logging.DEBUG
    else:
        processors = base_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
        min_level = logging.getLevelName(settings.log_level.upper())
        if not isinstance(min_level, int):
            min_level = logging.INFO

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # Library logs (uvicorn, sqlalchemy, weasyprint) go to the same stream.
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=min_level)
