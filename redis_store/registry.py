from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import redis

from .client import make_redis_client
from .facade import KeyValueStore
from .file_cache import FileCache
from .settings import Settings, settings as default_settings


@dataclass
class StoreRegistry:
    """Aggregates the store services built over one Redis client.

    Call sites receive this object (or its members) explicitly instead of
    resolving a process-wide client.
    """

    values: KeyValueStore
    files: FileCache

    @classmethod
    def from_client(
        cls,
        client: redis.Redis,
        *,
        scratch_dir: Optional[str] = None,
        key_prefix: str = "file:",
        file_ttl_seconds: Optional[int] = None,
    ) -> "StoreRegistry":
        values = KeyValueStore(client)
        return cls(
            values=values,
            files=FileCache(
                values,
                scratch_dir=scratch_dir,
                key_prefix=key_prefix,
                ttl_seconds=file_ttl_seconds,
            ),
        )

    @classmethod
    def from_settings(cls, cfg: Optional[Settings] = None, *, ping: bool = True) -> "StoreRegistry":
        cfg = cfg or default_settings
        client = make_redis_client(
            cfg.REDIS_URL,
            socket_timeout=cfg.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=cfg.REDIS_SOCKET_CONNECT_TIMEOUT,
            health_check_interval=cfg.REDIS_HEALTH_CHECK_INTERVAL,
            retry_on_timeout=cfg.REDIS_RETRY_ON_TIMEOUT,
            ping=ping,
        )
        return cls.from_client(
            client,
            scratch_dir=cfg.FILE_CACHE_DIR or cfg.TMPDIR,
            key_prefix=cfg.FILE_CACHE_KEY_PREFIX,
            file_ttl_seconds=cfg.FILE_TTL_SECONDS,
        )

    def close(self) -> None:
        self.values.client.close()
