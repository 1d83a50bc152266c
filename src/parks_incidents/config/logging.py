"""
Logging configuration for the parks incident desk.

structlog is the front end for every module. Standard library records (uvicorn,
httpx) are routed through the same processor chain, so the reference API, the
client and the console all emit one format: Rich console lines in development,
JSON lines elsewhere, optionally mirrored to a rotating file.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

from .config import Settings, get_settings

SIZE_UNITS = {"KB": 1024, "MB": 1024**2, "GB": 1024**3}

# loggers that drown incident events at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "multipart")


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure structlog and the standard library handlers.

    Args:
        settings: Settings to configure from; defaults to the cached environment settings
    """
    settings = settings or get_settings()
    level = logging.getLevelNamesMapping().get(settings.log_level.upper(), logging.INFO)

    shared = _shared_processors(settings)
    renderer = _renderer(settings)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )

    handlers = [_console_handler(settings)]
    if settings.log_file:
        handlers.append(_file_handler(settings))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    _quieten_third_party(settings)

    get_logger("config.logging").debug(
        "Logging configured",
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
    )


def _uses_console_renderer(settings: Settings) -> bool:
    return settings.is_development and settings.log_format != "json"


def _shared_processors(settings: Settings) -> list[Any]:
    def add_service_fields(logger, method_name, event_dict):
        event_dict.setdefault("environment", settings.environment)
        event_dict.setdefault("app_version", settings.app_version)
        return event_dict

    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_service_fields,
    ]


def _renderer(settings: Settings) -> Any:
    if _uses_console_renderer(settings):
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def _console_handler(settings: Settings) -> logging.Handler:
    if _uses_console_renderer(settings):
        return RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_level=False,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
    return logging.StreamHandler(sys.stderr)


def _file_handler(settings: Settings) -> logging.Handler:
    log_path = Path(settings.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if not settings.log_rotation:
        return logging.FileHandler(log_path, encoding="utf-8")
    return logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=parse_size(settings.log_max_size),
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )


def _quieten_third_party(settings: Settings) -> None:
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # request lines are already logged by the request logging middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if not settings.debug:
        logging.getLogger("uvicorn.error").setLevel(logging.WARNING)


def parse_size(size: str) -> int:
    """
    Parse a size such as ``"100MB"`` into bytes.

    Args:
        size: Integer byte count, optionally suffixed with KB, MB or GB

    Returns:
        int: Size in bytes
    """
    value = size.upper().strip()
    for suffix, factor in SIZE_UNITS.items():
        if value.endswith(suffix):
            return int(value[: -len(suffix)]) * factor
    return int(value)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name

    Returns:
        A structlog bound logger
    """
    return structlog.get_logger(name)
