"""
Binary file cache stored in Redis hashes.

Each file is kept under ``file:<name>`` as a two-field hash:

    fileName     original base name
    fileContent  Base64 of the raw bytes ("" for an empty file)

Files can be restored into a scratch directory or read back as bytes.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .exceptions import DecodeError, FileIOError, InvalidArgumentError
from .facade import KeyValueStore, require_ttl
from .utils.path_validator import PathValidator

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "file:"
FIELD_FILE_NAME = "fileName"
FIELD_FILE_CONTENT = "fileContent"

FileSource = Union[str, os.PathLike, BinaryIO]


def default_scratch_dir() -> Path:
    return Path(tempfile.gettempdir())


def encode_content(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


def decode_content(text: str) -> bytes:
    """Strict Base64 decode; malformed input raises DecodeError."""
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Cached file content is not valid Base64: {e}") from e


class FileCache:
    """Stores and restores files through a KeyValueStore.

    Holds no state about cached files; every call reads or writes Redis.
    """

    def __init__(
        self,
        store: KeyValueStore,
        scratch_dir: Union[str, Path, None] = None,
        key_prefix: str = CACHE_KEY_PREFIX,
        ttl_seconds: Optional[int] = None,
    ):
        if store is None:
            raise InvalidArgumentError("A KeyValueStore is required")
        self._store = store
        self.scratch_dir = Path(scratch_dir) if scratch_dir else default_scratch_dir()
        self.key_prefix = key_prefix
        self.ttl_seconds = require_ttl(ttl_seconds) if ttl_seconds is not None else None

    def cache_key(self, file_name: str) -> str:
        return f"{self.key_prefix}{file_name}"

    def store(self, file: Optional[FileSource], ttl_seconds: Optional[int] = None) -> str:
        """Cache a file's content under its base name.

        Args:
            file: Path to the file, or a binary file object with a ``name``
            ttl_seconds: Optional expiry, overriding the instance default

        Returns:
            The cache key the record was written under

        Raises:
            InvalidArgumentError: If no file (or no usable name) is given,
                or the TTL is not a positive number of seconds
            FileIOError: If the file cannot be read
            StoreUnavailableError: If Redis fails; nothing is left half-written
        """
        if file is None:
            raise InvalidArgumentError("File must not be None")
        ttl = require_ttl(ttl_seconds) if ttl_seconds is not None else self.ttl_seconds

        file_name, content = self._read_source(file)
        record = {
            FIELD_FILE_NAME: file_name,
            FIELD_FILE_CONTENT: encode_content(content),
        }
        key = self.cache_key(file_name)
        self._store.hash_put_all(key, record, ttl_seconds=ttl)

        logger.info(f"Cached {file_name} under {key} ({len(content)} bytes)")
        return key

    def restore(self, file_name: str) -> Optional[Path]:
        """Write a cached file into the scratch directory.

        Returns the path of the written file, or None when nothing is cached
        under ``file_name``. An existing file at that path is overwritten.

        Raises:
            InvalidArgumentError: If ``file_name`` is empty
            DecodeError: If the cached content is not valid Base64
            FileIOError: If the file cannot be written, or the cached name
                would place it outside the scratch directory
        """
        entries = self._entries(file_name)
        if not entries:
            logger.debug(f"No cached file for {file_name}")
            return None

        cached_name = entries.get(FIELD_FILE_NAME) or file_name
        content = decode_content(entries.get(FIELD_FILE_CONTENT) or "")

        try:
            target = PathValidator.validate_safe_path(self.scratch_dir, cached_name)
        except ValueError as e:
            raise FileIOError(f"Refusing to restore {cached_name!r}: {e}") from e

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            raise FileIOError(f"Failed to write restored file {target}: {e}") from e

        logger.info(f"Restored {cached_name} to {target} ({len(content)} bytes)")
        return target

    def restore_bytes(self, file_name: str) -> bytes:
        """Return the cached bytes for ``file_name``.

        A name that was never cached yields ``b""``, the same as a cached
        empty file. Use ``restore`` or ``exists`` to tell the two apart.
        """
        entries = self._entries(file_name)
        if not entries:
            logger.debug(f"No cached file for {file_name}, returning empty content")
        return decode_content(entries.get(FIELD_FILE_CONTENT) or "")

    def exists(self, file_name: str) -> bool:
        _require_name(file_name)
        return self._store.has_key(self.cache_key(file_name))

    def _entries(self, file_name: str) -> dict:
        _require_name(file_name)
        return self._store.hash_get_all(self.cache_key(file_name))

    @staticmethod
    def _read_source(file: FileSource) -> tuple[str, bytes]:
        # Encode everything in memory before anything is written to Redis
        if hasattr(file, "read"):
            raw_name = getattr(file, "name", None)
            if not isinstance(raw_name, (str, os.PathLike)) or not os.fspath(raw_name):
                raise InvalidArgumentError("File object has no usable name")
            file_name = Path(raw_name).name
            try:
                content = file.read()
            except OSError as e:
                raise FileIOError(f"Failed to read {file_name}: {e}") from e
            if isinstance(content, str):
                raise InvalidArgumentError(f"{file_name} must be opened in binary mode")
            return file_name, bytes(content)

        path = Path(file)
        if not path.name:
            raise InvalidArgumentError(f"Path has no file name: {file!r}")
        try:
            content = path.read_bytes()
        except OSError as e:
            raise FileIOError(f"Failed to read {path}: {e}") from e
        return path.name, content


def _require_name(file_name: str) -> None:
    if not isinstance(file_name, str) or not file_name:
        raise InvalidArgumentError("File name must be a non-empty string")
