"""
Custom exceptions for the Redis store facade and file cache.
"""


class StoreError(Exception):
    """Base exception for store errors."""
    pass


class InvalidArgumentError(StoreError, ValueError):
    """Raised when a required argument is missing or empty."""
    pass


class FileIOError(StoreError, OSError):
    """Raised when reading a source file or writing a restored file fails."""
    pass


class DecodeError(StoreError, ValueError):
    """Raised when cached file content is not valid Base64."""
    pass


class TypeMismatchError(StoreError, TypeError):
    """Raised when a stored value cannot be read as the requested type."""
    pass


class StoreUnavailableError(StoreError):
    """Raised when Redis is unreachable or replies with an error.

    Connection and timeout failures are never converted into default values;
    callers see this exception with the redis-py error chained as its cause.
    """
    pass
