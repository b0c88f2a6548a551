"""structlog setup shared by the API process and Alembic tooling."""

import logging
import sys

import structlog
from structlog.contextvars import merge_contextvars

from ironlog.core.config import Settings


def _add_app_and_env(settings: Settings):
    def processor(logger, method_name, event_dict):
        event_dict["app"] = settings.app_name
        event_dict["env"] = settings.environment
        return event_dict

    return processor


def configure_logging(settings: Settings) -> None:
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    is_dev = settings.debug or settings.environment in {"local", "development", "test"}

    shared_processors = [
        merge_contextvars,
        _add_app_and_env(settings),
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    renderer = structlog.dev.ConsoleRenderer() if is_dev else structlog.processors.JSONRenderer()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=True,
    )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
