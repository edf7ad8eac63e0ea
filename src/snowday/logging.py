"""structlog setup shared by the CLI and the API server."""

import logging
import os

import structlog

# Per-request chatter from these would drown the refresh events.
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _wants_json(json: bool | None) -> bool:
    if json is not None:
        return json
    return os.environ.get("LOG_FORMAT", "").lower() == "json"


def _processors(json: bool) -> list:
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json:
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def configure_logging(level: str | None = None, json: bool | None = None) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        level: Log level name. Falls back to LOG_LEVEL, then INFO.
        json: One JSON object per line instead of the console format.
              Falls back to LOG_FORMAT=json.
    """
    numeric_level = logging.getLevelName((level or os.environ.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(format="%(message)s", level=numeric_level)
    logging.getLogger().setLevel(numeric_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.configure(
        processors=_processors(_wants_json(json)),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
