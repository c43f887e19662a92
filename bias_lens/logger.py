"""
Logging for bias_lens: one "bias_lens" logger with stdout (and optional
file) handlers, and per-stage children that write through it.
"""

import logging
import sys
from typing import Optional


def setup_logger(
    name: str = "bias_lens",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Attach handlers to the named logger, or re-level it if they exist.

    Args:
        name: Logger to configure
        level: Level for the logger and all its handlers
        log_file: Also append records to this file

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)

    # Second call (e.g. --verbose): handlers exist, so only the level moves
    if logger.handlers:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


logger = setup_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """Stage logger such as "bias_lens.extractor"; records reach the package handlers."""
    return logging.getLogger(f"bias_lens.{module_name}")
