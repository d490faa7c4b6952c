"""
CoronaDB Logging

Unified logging based on loguru
"""

import sys

from loguru import logger

from .config import get_config

# Global flag to avoid initializing twice
_logging_initialized = False


def setup_logging() -> None:
    """Configure the log sinks"""
    global _logging_initialized

    if _logging_initialized:
        return

    config = get_config()

    # Remove the default handler
    logger.remove()

    # Console output with colors
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=config.log_level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if config.log_to_file:
        # All log records, rotated daily
        logger.add(
            config.log_dir / "coronadb_{time:YYYY-MM-DD}.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=config.log_level,
            rotation="00:00",
            retention="30 days",
            compression="zip",
        )

        # Errors get their own file
        logger.add(
            config.log_dir / "error_{time:YYYY-MM-DD}.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}\n{exception}",
            level="ERROR",
            rotation="00:00",
            retention="90 days",
            compression="zip",
            backtrace=True,
        )

    _logging_initialized = True
    logger.debug(f"Logging initialized - Level: {config.log_level}, Log dir: {config.log_dir}")


def get_logger(name: str):
    """
    Get a logger instance

    Args:
        name: logger name, usually __name__

    Returns:
        loguru logger bound to that name
    """
    if not _logging_initialized:
        setup_logging()
    return logger.bind(name=name)
