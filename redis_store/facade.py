"""
Typed facade over Redis scalar, hash, set, sorted-set and list commands.

Every method forwards to one redis-py command. Replies that do not confirm
anything (``None``) are normalized to ``0``, ``False`` or an empty
collection, so callers never see them. Connection failures and server errors
are raised as StoreUnavailableError.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Set

import redis

from .exceptions import InvalidArgumentError, StoreUnavailableError, TypeMismatchError

logger = logging.getLogger(__name__)

_SUPPORTED_TYPES = (str, bytes, int, float, bool)
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _count(value: Any) -> int:
    return int(value) if value is not None else 0


def _flag(value: Any) -> bool:
    return bool(value) if value is not None else False


def coerce(value: Any, as_type: Optional[type]) -> Any:
    """Interpret a stored value as ``as_type``.

    ``None`` (absent) passes through unchanged for every supported type.
    """
    _require_type(as_type)
    if value is None or as_type is None:
        return value
    if isinstance(value, bytes) and as_type is not bytes:
        value = value.decode("utf-8")
    try:
        if as_type is str:
            return value if isinstance(value, str) else str(value)
        if as_type is bytes:
            return value if isinstance(value, bytes) else str(value).encode("utf-8")
        if as_type is bool:
            text = str(value).strip().lower()
            if text in _TRUE_VALUES:
                return True
            if text in _FALSE_VALUES:
                return False
            raise ValueError(f"not a boolean: {value!r}")
        if as_type is int:
            return int(value)
        return float(value)
    except (TypeError, ValueError) as e:
        raise TypeMismatchError(f"Stored value {value!r} is not a valid {as_type.__name__}") from e


def _require_type(as_type: Optional[type]) -> None:
    if as_type is not None and as_type not in _SUPPORTED_TYPES:
        raise InvalidArgumentError(f"Unsupported value type: {as_type!r}")


@contextmanager
def _translate_errors(op: str, key: str) -> Iterator[None]:
    try:
        yield
    except redis.exceptions.ResponseError as e:
        if str(e).startswith("WRONGTYPE"):
            raise TypeMismatchError(f"{op} on {key!r}: {e}") from e
        logger.error(f"Redis rejected {op} on {key!r}: {e}")
        raise StoreUnavailableError(f"{op} failed for {key!r}: {e}") from e
    except redis.exceptions.DataError as e:
        raise InvalidArgumentError(f"{op} on {key!r}: {e}") from e
    except redis.exceptions.RedisError as e:
        logger.warning(f"Redis unavailable during {op} on {key!r}: {e}")
        raise StoreUnavailableError(f"{op} failed for {key!r}: {e}") from e


def _require_key(key: str) -> str:
    if not isinstance(key, str) or not key.strip():
        raise InvalidArgumentError("Redis key must be a non-empty string")
    return key


def require_ttl(seconds: int) -> int:
    """Validate a TTL in seconds; it must be a positive integer."""
    try:
        seconds = int(seconds)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Invalid TTL: {seconds!r}") from e
    if seconds <= 0:
        raise InvalidArgumentError(f"TTL must be positive, got {seconds}")
    return seconds


class KeyValueStore:
    """Key-value operations against an injected redis-py client.

    The client should be created with ``decode_responses=True`` (see
    ``make_redis_client``) so string values come back as ``str``.
    """

    def __init__(self, client: redis.Redis):
        if client is None:
            raise InvalidArgumentError("A Redis client is required")
        self._client = client

    @property
    def client(self) -> redis.Redis:
        return self._client

    def ping(self) -> bool:
        with _translate_errors("PING", "-"):
            return _flag(self._client.ping())

    # --- Scalars ---
    def set_value(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> Any:
        _require_key(key)
        ex = require_ttl(ttl_seconds) if ttl_seconds is not None else None
        with _translate_errors("SET", key):
            self._client.set(key, value, ex=ex)
        return value

    def get_value(self, key: str, as_type: Optional[type] = None) -> Any:
        _require_key(key)
        _require_type(as_type)
        with _translate_errors("GET", key):
            value = self._client.get(key)
        return coerce(value, as_type)

    # --- Hashes ---
    def hash_put(self, key: str, field: str, value: Any) -> Any:
        _require_key(key)
        with _translate_errors("HSET", key):
            self._client.hset(key, field, value)
        return value

    def hash_put_all(
        self, key: str, mapping: Mapping[str, Any], ttl_seconds: Optional[int] = None
    ) -> Mapping[str, Any]:
        """Write all fields of ``mapping`` in a single HSET.

        With ``ttl_seconds`` the HSET and EXPIRE run in one MULTI/EXEC
        transaction, so the hash never exists without its TTL.
        """
        _require_key(key)
        ttl = require_ttl(ttl_seconds) if ttl_seconds is not None else None
        if not mapping:
            return mapping
        if ttl is None:
            with _translate_errors("HSET", key):
                self._client.hset(key, mapping=dict(mapping))
            return mapping
        with _translate_errors("HSET+EXPIRE", key):
            with self._client.pipeline(transaction=True) as pipe:
                pipe.hset(key, mapping=dict(mapping))
                pipe.expire(key, ttl)
                pipe.execute()
        return mapping

    def hash_get(self, key: str, field: str, as_type: Optional[type] = None) -> Any:
        _require_key(key)
        _require_type(as_type)
        with _translate_errors("HGET", key):
            value = self._client.hget(key, field)
        return coerce(value, as_type)

    def hash_multi_get(self, key: str, fields: Iterable[str]) -> List[Any]:
        _require_key(key)
        fields = list(fields)
        if not fields:
            return []
        with _translate_errors("HMGET", key):
            values = self._client.hmget(key, fields)
        return list(values) if values is not None else [None] * len(fields)

    def hash_get_all(self, key: str) -> Dict[str, Any]:
        _require_key(key)
        with _translate_errors("HGETALL", key):
            entries = self._client.hgetall(key)
        return dict(entries) if entries else {}

    def hash_delete_key(self, key: str, field: str) -> int:
        return self.hash_delete_keys(key, [field])

    def hash_delete_keys(self, key: str, fields: Iterable[str]) -> int:
        _require_key(key)
        fields = list(fields)
        if not fields:
            return 0
        with _translate_errors("HDEL", key):
            return _count(self._client.hdel(key, *fields))

    # --- Sets ---
    def set_add(self, key: str, *values: Any) -> int:
        _require_key(key)
        if not values:
            return 0
        with _translate_errors("SADD", key):
            return _count(self._client.sadd(key, *values))

    def set_delete(self, key: str, *values: Any) -> int:
        _require_key(key)
        if not values:
            return 0
        with _translate_errors("SREM", key):
            return _count(self._client.srem(key, *values))

    def set_get_all(self, key: str) -> Set[Any]:
        _require_key(key)
        with _translate_errors("SMEMBERS", key):
            members = self._client.smembers(key)
        return set(members) if members else set()

    # --- Sorted sets ---
    def zset_add(self, key: str, mapping: Mapping[Any, float]) -> int:
        """Add members with their scores; returns the number of new members."""
        _require_key(key)
        if not mapping:
            return 0
        with _translate_errors("ZADD", key):
            return _count(self._client.zadd(key, dict(mapping)))

    def zset_delete(self, key: str, *members: Any) -> int:
        _require_key(key)
        if not members:
            return 0
        with _translate_errors("ZREM", key):
            return _count(self._client.zrem(key, *members))

    # --- Lists ---
    def list_push(self, key: str, value: Any) -> int:
        """Append to the tail of the list; returns the new list length."""
        _require_key(key)
        with _translate_errors("RPUSH", key):
            return _count(self._client.rpush(key, value))

    def list_push_all(self, key: str, values: Iterable[Any]) -> int:
        _require_key(key)
        values = list(values)
        if not values:
            return 0
        with _translate_errors("RPUSH", key):
            return _count(self._client.rpush(key, *values))

    def list_get(self, key: str, start: int, end: int) -> List[Any]:
        """Elements from ``start`` to ``end`` inclusive (``0, -1`` is the whole list)."""
        _require_key(key)
        with _translate_errors("LRANGE", key):
            items = self._client.lrange(key, start, end)
        return list(items) if items else []

    def list_get_all(self, key: str) -> List[Any]:
        return self.list_get(key, 0, -1)

    # --- Keys ---
    def has_key(self, key: str, field: Optional[str] = None) -> bool:
        """Whether ``key`` exists, or whether hash ``key`` has ``field``."""
        _require_key(key)
        if field is None:
            with _translate_errors("EXISTS", key):
                return _count(self._client.exists(key)) > 0
        with _translate_errors("HEXISTS", key):
            return _flag(self._client.hexists(key, field))

    def delete(self, key: str) -> bool:
        _require_key(key)
        with _translate_errors("DEL", key):
            return _count(self._client.delete(key)) > 0

    def delete_keys(self, keys: Iterable[str]) -> int:
        keys = [_require_key(k) for k in keys]
        if not keys:
            return 0
        with _translate_errors("DEL", keys[0]):
            return _count(self._client.delete(*keys))

    def expire(self, key: str, seconds: int) -> bool:
        """Set or refresh the TTL of ``key``; False when the key does not exist."""
        _require_key(key)
        seconds = require_ttl(seconds)
        with _translate_errors("EXPIRE", key):
            return _flag(self._client.expire(key, seconds))

    def ttl(self, key: str) -> int:
        """Remaining TTL in seconds; -1 when persistent, -2 when absent."""
        _require_key(key)
        with _translate_errors("TTL", key):
            value = self._client.ttl(key)
        return int(value) if value is not None else -2
