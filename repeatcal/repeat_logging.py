"""
Central logging configuration for repeatcal.

Sets the level of the package loggers and the root logger. Debug output can be
forced through environment variables without touching code.
"""

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter

PACKAGE_LOGGERS = [
    "repeatcal",
    "repeatcal.repeat_expander",
    "repeatcal.occurrence_mutator",
    "repeatcal.scheduler",
    "repeatcal.config_loader",
    "repeatcal.id_factory",
]

# Third-party loggers kept quiet even in debug mode
QUIET_LOGGERS = ["pydantic", "yaml"]

TRUTHY_VALUES = frozenset({"1", "true", "yes", "on"})

# HH:MM:SS  LEVEL   logger.name: message (only the level is colorized)
CONSOLE_FORMAT = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def env_flag_enabled(name: str) -> bool:
    """Return True when environment variable ``name`` holds a truthy value."""
    return os.getenv(name, "").strip().lower() in TRUTHY_VALUES


def install_console_handler(logger: Optional[logging.Logger] = None) -> bool:
    """Attach a colorized stderr handler unless the logger already has one.

    Returns:
        True if a handler was added
    """
    logger = logger or logging.getLogger()
    if logger.handlers:
        return False
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(
        ColoredFormatter(CONSOLE_FORMAT, datefmt="%H:%M:%S", log_colors=LEVEL_COLORS)
    )
    logger.addHandler(handler)
    return True


def configure_logging(
    debug_mode: bool = False,
    force_debug: Optional[bool] = None,
    level_name: Optional[str] = None,
) -> None:
    """
    Configure logging levels for repeatcal.

    Args:
        debug_mode: Whether to enable debug logging for repeatcal modules
        force_debug: Override debug mode setting (None to use env var detection)
        level_name: Root level to use outside debug mode (defaults to INFO)

    Environment Variables:
        REPEATCAL_DEBUG: Set to '1', 'true', 'yes' or 'on' to force debug logging
        REPEATCAL_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_log_level = os.getenv("REPEATCAL_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_flag_enabled("REPEATCAL_DEBUG"):
        final_debug = True
    else:
        final_debug = debug_mode

    if final_debug:
        root_level = logging.DEBUG
    elif level_name:
        root_level = getattr(logging, level_name.upper(), logging.INFO)
    else:
        root_level = logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)
    install_console_handler(root_logger)

    package_level = logging.DEBUG if final_debug else max(logging.INFO, root_level)
    for name in PACKAGE_LOGGERS:
        logging.getLogger(name).setLevel(package_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if final_debug:
        root_logger.info("Debug logging enabled for repeatcal modules.")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for name in ["repeatcal", *QUIET_LOGGERS]:
        status[name] = logging.getLevelName(logging.getLogger(name).level)
    return status
