import logging
import os

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "casual_tools"

# Server tool listing goes through these, their output follows our level
LIBRARY_LOGGERS = ("fastmcp", "mcp")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def _resolve_level(level: str | int | None) -> str | int:
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        return level.upper()
    return level


def configure_logging(
    level: str | int | None = None,
    logger: logging.Logger | None = None,
) -> logging.Logger:
    """Send casual-tools log records to stderr through rich.

    Args:
        level: Level name or number, defaults to the LOG_LEVEL environment
            variable and then INFO
        logger: Logger to configure, defaults to the package root logger

    Returns:
        The configured logger
    """
    level = _resolve_level(level)
    if logger is None:
        logger = logging.getLogger(ROOT_LOGGER)

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    logger.setLevel(level)
    logger.handlers = [handler]

    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(level)

    logger.debug(f"Logging configured at {logging.getLevelName(logger.level)}")
    return logger
