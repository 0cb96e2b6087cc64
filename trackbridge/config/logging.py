"""Loguru setup for trackbridge.

Every module gets its logger from ``get_logger(__name__)``; the returned
logger carries ``module`` and ``service`` extras, which the JSON file sink
records on every line.
"""

import functools
from pathlib import Path
import sys
from typing import Any

from loguru import logger

from .settings import settings


def setup_loguru_logger(verbose: bool = False) -> None:
    """Install the console and rotating file sinks.

    ``verbose`` forces DEBUG on the console and turns on loguru diagnostics.
    """
    logger.remove()

    log_file_path = Path(settings.logging.log_file)
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    logger.configure(extra={"service": "trackbridge", "module": "root"})

    console_level = "DEBUG" if verbose else settings.logging.console_level
    logger.add(
        sink=sys.stdout,
        level=console_level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:"
            "<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=verbose,
        diagnose=verbose,
    )

    # File writes go through loguru's queue unless real-time debugging is on
    enqueue_logs = not settings.logging.real_time_debug
    logger.add(
        sink=str(log_file_path),
        level=settings.logging.file_level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {process}:{thread} | {extra[service]} | {extra[module]} | {name}:{function}:{line} | {message}",
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        backtrace=True,
        diagnose=True,
        enqueue=enqueue_logs,
        catch=True,
        serialize=True,
    )


def get_logger(name: str) -> Any:  # Loguru does not export its logger type
    """Return the shared loguru logger bound to ``name``."""
    return logger.bind(
        module=name,
        service="trackbridge",
    )


def log_startup_info() -> None:
    """Log a startup banner and the active configuration at debug level."""
    local_logger = get_logger(__name__)
    separator = "=" * 50

    local_logger.info("{}", separator)
    local_logger.info("trackbridge playlist reconciliation")
    local_logger.info("{}", separator)

    local_logger.debug("Configuration:")
    config_dict = settings.model_dump()
    for section_name, section_values in config_dict.items():
        local_logger.debug("  {}:", section_name.upper())
        if isinstance(section_values, dict):
            for key, value in section_values.items():
                if "token" in key or "secret" in key:
                    value = "***" if value else ""
                local_logger.debug("    {}: {}", key.upper(), str(value))
        else:
            local_logger.debug("    {}", str(section_values))


def resilient_operation(operation_name=None):
    """Log any exception escaping a connector call, then re-raise it.

    Retries live in the connectors themselves; this only leaves a traceback
    in the log tagged with ``operation_name``.
    """

    def decorator(func):
        op_name = operation_name or func.__name__

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.exception(f"Error in {op_name}: {e!s}")
                raise

        return wrapper

    return decorator
