"""structlog + stdlib logging for the API process.

All records, structlog's and foreign ones (uvicorn, httpx), are rendered by a
single ``ProcessorFormatter``: JSON in prod, colored console otherwise.
Handlers run on a ``QueueListener`` thread so request handlers never block on
stream writes. TMDB credentials travel in the query string, so every rendered
event passes through ``_redact_api_key`` first.
"""

from __future__ import annotations

import atexit
import copy
import logging
import logging.config
import queue
import re
import sys
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
from typing import Any

import structlog

from moviestudio.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

# Loggers that log every request URL at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_API_KEY_RE = re.compile(r"(api_key=)[^&\s\"']+")


def _drop_color_message(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    # uvicorn sends an ANSI copy of each message as "color_message".
    event_dict.pop("color_message", None)
    return event_dict


def _redact_api_key(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key, value in event_dict.items():
        if isinstance(value, str) and "api_key=" in value:
            event_dict[key] = _API_KEY_RE.sub(r"\1***", value)
    return event_dict


def _add_record_created_timestamp_utc(
    _: Any, __: Any, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Timestamp foreign records with ``record.created``, not the render time."""
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        event_dict["timestamp"] = created.isoformat().replace("+00:00", "Z")
    return event_dict


def _renderer(config: AppConfig) -> structlog.typing.Processor:
    if config.log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _formatter_kwargs(config: AppConfig) -> dict[str, Any]:
    return {
        "foreign_pre_chain": [
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            _add_record_created_timestamp_utc,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
        ],
        "processors": [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _redact_api_key,
            _renderer(config),
        ],
    }


def _logger_levels(config: AppConfig) -> dict[str, str]:
    levels = {name: config.log_level for name in _SERVER_LOGGERS}
    chatty = config.log_level if config.log_level == "DEBUG" else "WARNING"
    levels.update({name: chatty for name in _CHATTY_LOGGERS})
    return levels


def build_logging_config(config: AppConfig) -> dict[str, Any]:
    """dictConfig handed to uvicorn so its own loggers render through structlog."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structlog": {
                "()": structlog.stdlib.ProcessorFormatter,
                **_formatter_kwargs(config),
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "structlog",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            name: {"level": level, "handlers": [], "propagate": True}
            for name, level in _logger_levels(config).items()
        },
        "root": {"handlers": ["console"], "level": config.log_level},
    }


class _LevelRangeFilter(logging.Filter):
    """Pass records whose level lies in ``[min_level, max_level]``."""

    def __init__(self, min_level: int, max_level: int) -> None:
        super().__init__()
        self._min = min_level
        self._max = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return self._min <= record.levelno <= self._max


class _RecordQueueHandler(QueueHandler):
    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # The stock prepare() formats record.msg into a string, losing the
        # event dict that ProcessorFormatter needs on the listener side.
        return copy.copy(record)


class _BackgroundLogging:
    """Owns the QueueListener that writes records off the event loop."""

    def __init__(self) -> None:
        self._listener: QueueListener | None = None

    def start(self, config: AppConfig) -> None:
        self.stop()
        formatter = structlog.stdlib.ProcessorFormatter(**_formatter_kwargs(config))

        stdout = logging.StreamHandler(stream=sys.stdout)
        stdout.addFilter(_LevelRangeFilter(logging.NOTSET, logging.WARNING))
        stderr = logging.StreamHandler(stream=sys.stderr)
        stderr.addFilter(_LevelRangeFilter(logging.ERROR, logging.CRITICAL))
        for handler in (stdout, stderr):
            handler.setFormatter(formatter)

        records: queue.Queue[logging.LogRecord] = queue.Queue()
        root = logging.getLogger()
        root.handlers.clear()
        root.addHandler(_RecordQueueHandler(records))
        root.setLevel(config.log_level)

        # Loggers created before this point would otherwise keep their handlers.
        for name in list(logging.root.manager.loggerDict):
            existing = logging.getLogger(name)
            existing.handlers.clear()
            existing.propagate = True
        for name, level in _logger_levels(config).items():
            logging.getLogger(name).setLevel(level)

        self._listener = QueueListener(
            records, stdout, stderr, respect_handler_level=True
        )
        self._listener.start()

    def stop(self) -> None:
        listener, self._listener = self._listener, None
        if listener is not None:
            listener.stop()


_background = _BackgroundLogging()
atexit.register(_background.stop)


def configure_logging(config: AppConfig) -> dict[str, Any]:
    """Configure structlog and stdlib logging; returns uvicorn's ``log_config``."""
    structlog.configure(
        processors=[
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    log_config = build_logging_config(config)
    logging.config.dictConfig(log_config)
    _background.start(config)

    log.info(
        "logging_configured",
        log_format=config.log_format,
        log_level=config.log_level,
    )
    return log_config
