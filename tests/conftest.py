import copy
import logging
import time

import pytest
import redis

from redis_store import FileCache, KeyValueStore
from redis_store.utils.logging import PACKAGE_LOGGER

WRONGTYPE = "WRONGTYPE Operation against a key holding the wrong kind of value"


class FakeRedis:
    """In-memory stand-in for the redis-py commands used by KeyValueStore.

    Replies mimic a client created with ``decode_responses=True``.
    """

    def __init__(self):
        self.data = {}
        self.expiry = {}

    # helpers
    @staticmethod
    def _enc(value):
        if isinstance(value, bool) or value is None:
            raise redis.exceptions.DataError(f"Invalid input of type: {type(value).__name__!r}")
        if isinstance(value, bytes):
            return value.decode("utf-8")
        if isinstance(value, float):
            return repr(value)
        return str(value)

    def _purge(self, key):
        deadline = self.expiry.get(key)
        if deadline is not None and deadline <= time.monotonic():
            self.data.pop(key, None)
            self.expiry.pop(key, None)

    def _get(self, key, kind):
        self._purge(key)
        value = self.data.get(key)
        if value is not None and type(value) is not kind:
            raise redis.exceptions.ResponseError(WRONGTYPE)
        return value

    def _get_or_create(self, key, kind):
        value = self._get(key, kind)
        if value is None:
            value = kind()
            self.data[key] = value
        return value

    def _drop_if_empty(self, key):
        if key in self.data and not self.data[key]:
            del self.data[key]
            self.expiry.pop(key, None)

    # server
    def ping(self):
        return True

    def pipeline(self, transaction=True):
        return FakePipeline(self)

    def close(self):
        pass

    # strings
    def set(self, key, value, ex=None):
        self.data[key] = self._enc(value)
        self.expiry.pop(key, None)
        if ex is not None:
            self.expiry[key] = time.monotonic() + ex
        return True

    def get(self, key):
        return self._get(key, str)

    # hashes
    def hset(self, key, field=None, value=None, mapping=None):
        items = {}
        if field is not None:
            items[field] = value
        if mapping:
            items.update(mapping)
        if not items:
            raise redis.exceptions.DataError("'hset' with no key value pairs")
        h = self._get_or_create(key, dict)
        added = 0
        for f, v in items.items():
            if f not in h:
                added += 1
            h[self._enc(f)] = self._enc(v)
        return added

    def hget(self, key, field):
        return (self._get(key, dict) or {}).get(field)

    def hmget(self, key, fields):
        h = self._get(key, dict) or {}
        return [h.get(f) for f in fields]

    def hgetall(self, key):
        return dict(self._get(key, dict) or {})

    def hdel(self, key, *fields):
        h = self._get(key, dict) or {}
        removed = sum(1 for f in fields if h.pop(f, None) is not None)
        self._drop_if_empty(key)
        return removed

    def hexists(self, key, field):
        return field in (self._get(key, dict) or {})

    # sets
    def sadd(self, key, *values):
        s = self._get_or_create(key, set)
        before = len(s)
        s.update(self._enc(v) for v in values)
        return len(s) - before

    def srem(self, key, *values):
        s = self._get(key, set) or set()
        removed = 0
        for v in values:
            if self._enc(v) in s:
                s.discard(self._enc(v))
                removed += 1
        self._drop_if_empty(key)
        return removed

    def smembers(self, key):
        return set(self._get(key, set) or set())

    # sorted sets
    def zadd(self, key, mapping):
        z = self._get_or_create(key, ZSet)
        added = 0
        for member, score in mapping.items():
            member = self._enc(member)
            if member not in z:
                added += 1
            z[member] = float(score)
        return added

    def zrem(self, key, *members):
        z = self._get(key, ZSet) or ZSet()
        removed = sum(1 for m in members if z.pop(self._enc(m), None) is not None)
        self._drop_if_empty(key)
        return removed

    # lists
    def rpush(self, key, *values):
        lst = self._get_or_create(key, list)
        lst.extend(self._enc(v) for v in values)
        return len(lst)

    def lrange(self, key, start, end):
        lst = self._get(key, list) or []
        end = len(lst) if end == -1 else end + 1
        return lst[start:end]

    # keys
    def exists(self, *keys):
        for key in keys:
            self._purge(key)
        return sum(1 for key in keys if key in self.data)

    def delete(self, *keys):
        removed = 0
        for key in keys:
            self._purge(key)
            if self.data.pop(key, None) is not None:
                removed += 1
            self.expiry.pop(key, None)
        return removed

    def expire(self, key, seconds):
        self._purge(key)
        if key not in self.data:
            return False
        self.expiry[key] = time.monotonic() + seconds
        return True

    def ttl(self, key):
        self._purge(key)
        if key not in self.data:
            return -2
        deadline = self.expiry.get(key)
        if deadline is None:
            return -1
        return max(0, int(round(deadline - time.monotonic())))


class ZSet(dict):
    """Sorted-set value type, kept distinct from hashes for WRONGTYPE checks."""


class FakePipeline:
    """Queues commands and applies them all or none, like MULTI/EXEC."""

    def __init__(self, server):
        self._server = server
        self._queue = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self._queue = []

    def __getattr__(self, name):
        command = getattr(self._server, name)

        def queue(*args, **kwargs):
            self._queue.append((command, args, kwargs))
            return self

        return queue

    def execute(self):
        data = copy.deepcopy(self._server.data)
        expiry = dict(self._server.expiry)
        try:
            return [command(*args, **kwargs) for command, args, kwargs in self._queue]
        except Exception:
            self._server.data = data
            self._server.expiry = expiry
            raise
        finally:
            self._queue = []


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def kv(fake_redis):
    return KeyValueStore(fake_redis)


@pytest.fixture
def scratch_dir(tmp_path):
    d = tmp_path / "scratch"
    d.mkdir()
    return d


@pytest.fixture
def file_cache(kv, scratch_dir):
    return FileCache(kv, scratch_dir=scratch_dir)


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
