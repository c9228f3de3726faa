"""Logging configuration for healthwait."""

import logging
import os
from pathlib import Path


# Levels accepted from the config file or HEALTHWAIT_LOG_LEVEL
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

DEFAULT_LOG_LEVEL = "DEBUG"


def get_log_path() -> Path:
    """Return the log file location, honouring HEALTHWAIT_LOG."""
    override = os.environ.get("HEALTHWAIT_LOG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".healthwait.log"


def resolve_log_level(level: str | None = None) -> int:
    """
    Pick the file log level.

    HEALTHWAIT_LOG_LEVEL wins over the configured level; unknown names fall
    back to DEBUG so a typo never silences the watch log.
    """
    name = os.environ.get("HEALTHWAIT_LOG_LEVEL") or level or DEFAULT_LOG_LEVEL
    name = name.upper()
    if name not in LOG_LEVELS:
        name = DEFAULT_LOG_LEVEL
    return getattr(logging, name)


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Configure the healthwait logger to write to ~/.healthwait.log

    Args:
        level: Level name from the config file, defaults to DEBUG

    Returns:
        logging.Logger: Configured logger instance
    """
    log_path = get_log_path()
    log_level = resolve_log_level(level)

    logger = logging.getLogger("healthwait")
    logger.setLevel(log_level)

    # Each watch reconfigures; drop handlers from a previous call
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []

    try:
        handler = logging.FileHandler(log_path)
        handler.setLevel(log_level)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)
    except OSError as e:
        # Watch results still reach the console; only the log is lost
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        logger.addHandler(console_handler)
        logger.warning(f"Could not create log file at {log_path}: {e}")

    return logger
