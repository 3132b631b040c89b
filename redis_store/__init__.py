"""Typed Redis facade and Base64 file cache"""

from .exceptions import (
    DecodeError,
    FileIOError,
    InvalidArgumentError,
    StoreError,
    StoreUnavailableError,
    TypeMismatchError,
)
from .facade import KeyValueStore
from .file_cache import FileCache
from .registry import StoreRegistry

__all__ = [
    "KeyValueStore",
    "FileCache",
    "StoreRegistry",
    "StoreError",
    "InvalidArgumentError",
    "FileIOError",
    "DecodeError",
    "TypeMismatchError",
    "StoreUnavailableError",
]
