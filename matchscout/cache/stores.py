"""Key-value stores backing the match cache."""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterator, Optional
from urllib.parse import urlparse

from redis import Redis
from redis.exceptions import OutOfMemoryError, RedisError, ResponseError

from matchscout.exceptions import StorageError, StorageQuotaExceeded

logger = logging.getLogger(__name__)


def _sanitize_url(url: str) -> str:
    """Remove credentials from URL for safe logging."""
    try:
        parsed = urlparse(url)
        if parsed.password:
            sanitized = parsed._replace(
                netloc=f"{parsed.username or ''}:*@{parsed.hostname}:{parsed.port or 6379}"
            )
            return sanitized.geturl()
        return url
    except ValueError:
        return url


class KeyValueStore(ABC):
    """
    Opaque persistent string store addressed by key.

    Implementations raise StorageError on failure and StorageQuotaExceeded
    when a write is refused for capacity.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def scan_keys(self, prefix: str) -> Iterator[str]:
        """Yield every key starting with ``prefix``."""
        pass


class RedisKeyValueStore(KeyValueStore):
    """
    Redis-backed store.

    Keys never expire server-side; the match cache prunes by entry age.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        password: Optional[str] = None,
        client: Optional[Redis] = None
    ):
        self.redis_url = redis_url
        if client is not None:
            self._redis = client
        else:
            self._redis = Redis.from_url(
                redis_url,
                password=password,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )
        logger.info(f"Match cache store using Redis at {_sanitize_url(redis_url)}")

    @property
    def is_available(self) -> bool:
        """Check if Redis answers a ping."""
        try:
            return bool(self._redis.ping())
        except RedisError:
            return False

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._redis.get(key)
        except RedisError as e:
            raise StorageError(f"Redis GET {key} failed: {e}") from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self._redis.set(key, value)
        except OutOfMemoryError as e:
            raise StorageQuotaExceeded(f"Redis out of memory writing {key}: {e}") from e
        except ResponseError as e:
            if str(e).startswith("OOM"):
                raise StorageQuotaExceeded(f"Redis out of memory writing {key}: {e}") from e
            raise StorageError(f"Redis SET {key} failed: {e}") from e
        except RedisError as e:
            raise StorageError(f"Redis SET {key} failed: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._redis.delete(key)
        except RedisError as e:
            raise StorageError(f"Redis DEL {key} failed: {e}") from e

    def scan_keys(self, prefix: str) -> Iterator[str]:
        pattern = f"{prefix}*"
        cursor = 0
        try:
            while True:
                cursor, keys = self._redis.scan(cursor=cursor, match=pattern, count=100)
                for key in keys:
                    yield key.decode("utf-8") if isinstance(key, bytes) else key
                if cursor == 0:
                    break
        except RedisError as e:
            raise StorageError(f"Redis SCAN {pattern} failed: {e}") from e


class InMemoryKeyValueStore(KeyValueStore):
    """
    Process-local store for a single client context.

    ``max_bytes`` bounds the total UTF-8 size of stored values; a write that
    would exceed it raises StorageQuotaExceeded and leaves the old value.
    """

    def __init__(self, max_bytes: Optional[int] = None):
        self.max_bytes = max_bytes
        self._data: Dict[str, str] = {}

    def _used_bytes(self, excluding: Optional[str] = None) -> int:
        return sum(
            len(value.encode("utf-8"))
            for key, value in self._data.items()
            if key != excluding
        )

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.max_bytes is not None:
            needed = self._used_bytes(excluding=key) + len(value.encode("utf-8"))
            if needed > self.max_bytes:
                raise StorageQuotaExceeded(
                    f"Writing {key} needs {needed} bytes, quota is {self.max_bytes}"
                )
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def scan_keys(self, prefix: str) -> Iterator[str]:
        # Snapshot so callers can delete while iterating
        for key in list(self._data):
            if key.startswith(prefix):
                yield key
