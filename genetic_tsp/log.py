"""
Logging helpers shared by the solver, the api and the cli.
"""

import logging
import os
from typing import Optional, Union

LOG_FORMAT = "[%(asctime)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"
ROOT_LOGGER = "genetic_tsp"


def _parse_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = os.environ.get("GENETIC_TSP_LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logger(level: Union[int, str, None] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger once.

    Args:
        level: Logging level name or number. Falls back to
            ``GENETIC_TSP_LOG_LEVEL`` and then INFO.
        log_file: Optional path of an extra file handler.

    Returns:
        The ``genetic_tsp`` logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(_parse_level(level))
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger of the package logger, e.g. ``get_logger(__name__)``."""
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
