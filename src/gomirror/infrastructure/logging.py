"""Loguru configuration shared by every gomirror component.

Diagnostics always go to stderr. Result lines meant for the user are
printed to stdout by the CLI display handlers, not by the logger.
"""

import sys
import typing as t

from loguru import logger

from ..config.settings import Environment, LogLevel, Settings

if t.TYPE_CHECKING:
    import loguru

_DEV_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)
_PLAIN_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]} - {message}"

_configured = False


def configure_logger(
    level: LogLevel = LogLevel.INFO,
    environment: Environment = Environment.DEVELOPMENT,
) -> None:
    """Install a single stderr sink, replacing any existing ones."""
    global _configured

    logger.remove()
    logger.configure(extra={"name": "gomirror"})
    is_dev = environment == Environment.DEVELOPMENT
    logger.add(
        sys.stderr,
        level=str(level),
        format=_DEV_FORMAT if is_dev else _PLAIN_FORMAT,
        colorize=is_dev,
        backtrace=is_dev,
        diagnose=False,
    )
    _configured = True


def setup_logging(settings: Settings) -> None:
    """Configure logging from application settings."""
    configure_logger(level=settings.log_level, environment=settings.environment)


def get_logger(name: str) -> "loguru.Logger":
    """Return a logger bound to ``name``, configuring defaults on first use."""
    if not _configured:
        configure_logger()
    return logger.bind(name=name)


def reset_logging() -> None:
    """Drop all sinks so the next ``get_logger`` call reconfigures."""
    global _configured

    logger.remove()
    _configured = False


def is_configured() -> bool:
    return _configured
