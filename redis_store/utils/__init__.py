"""Utility modules for the Redis store"""

from .logging import enable_store_logging, get_logger
from .path_validator import PathValidator

__all__ = [
    "enable_store_logging",
    "get_logger",
    "PathValidator",
]
