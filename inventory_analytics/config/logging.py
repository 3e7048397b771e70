"""
Logging Configuration for the Inventory Analytics Engine

Structured logging through structlog. Every line carries the service name and
version, and lines logged while a report is being generated also carry its
``report_id`` (bound by the generator through structlog contextvars).

Reports and alert listings are written to stdout, so log output goes to stderr.
"""

import logging
import sys
from typing import Any, Dict, Optional, TextIO

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from inventory_analytics.config.settings import Settings, get_settings

# Third-party loggers that are only useful when debugging
QUIET_LOGGERS = ["faker", "faker.factory"]


class ServiceInfo:
    """Processor adding the service name and version to every event"""

    def __init__(self, settings: Settings):
        self.service = settings.app_name
        self.version = settings.version

    def __call__(self, logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", self.service)
        event_dict.setdefault("version", self.version)
        return event_dict


def build_formatter(settings: Settings) -> ProcessorFormatter:
    """Formatter shared by structlog and stdlib loggers"""
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso", utc=True),
        ServiceInfo(settings),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=shared_processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if settings.monitoring.log_format == "json":
        renderer = JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    return ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)


def configure_logging(
    log_level: Optional[str] = None,
    stream: Optional[TextIO] = None,
    settings: Optional[Settings] = None,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        stream: Destination stream, stderr by default
        settings: Settings to use instead of the cached application settings
    """
    settings = settings or get_settings()
    level = log_level or settings.monitoring.log_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(build_formatter(settings))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.get_logger(__name__).debug(
        "Logging configured",
        level=level,
        format=settings.monitoring.log_format,
        environment=settings.app_env,
    )
