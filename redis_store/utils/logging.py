"""
Console and file logging for scripts that use the store.

Library modules only call ``logging.getLogger(__name__)``; nothing here runs
on import.
"""

import logging
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "redis_store"
CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _attach(logger: logging.Logger, handler: logging.Handler, fmt: str, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Logger with a console handler, configured once per name."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        level = logging.INFO if level is None else level
        logger.setLevel(level)
        _attach(logger, logging.StreamHandler(), CONSOLE_FORMAT, level)
        logger.propagate = False
    return logger


def enable_store_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Show records from every ``redis_store.*`` module (facade, file cache,
    client) on the console, and optionally append them to ``log_file``.

    Calling it again only changes the level; a file handler is added once
    per path.

    Args:
        level: Minimum level for the package loggers
        log_file: Optional path of a log file; parent directories are created

    Returns:
        The package logger
    """
    logger = get_logger(PACKAGE_LOGGER, level)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)

    if log_file is not None:
        path = Path(log_file).resolve()
        already = any(
            isinstance(h, logging.FileHandler) and Path(h.baseFilename) == path
            for h in logger.handlers
        )
        if not already:
            path.parent.mkdir(parents=True, exist_ok=True)
            _attach(logger, logging.FileHandler(path, encoding='utf-8'), FILE_FORMAT, level)

    return logger
