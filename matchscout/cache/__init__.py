"""Cache Module - Caching services."""
from matchscout.cache.match_cache import (
    MatchCacheService,
    UserMatchCache,
    CACHE_PREFIX,
    CACHE_EXPIRY_DAYS
)
from matchscout.cache.stores import (
    KeyValueStore,
    RedisKeyValueStore,
    InMemoryKeyValueStore
)
from matchscout.config_loader import MatchCacheConfig


def build_cache_service(config: MatchCacheConfig) -> MatchCacheService:
    """Construct the configured store and wrap it in a MatchCacheService."""
    if config.backend == "memory":
        store = InMemoryKeyValueStore(max_bytes=config.max_bytes)
    else:
        store = RedisKeyValueStore(config.redis_url, password=config.password)
    return MatchCacheService(
        store,
        key_prefix=config.key_prefix,
        expiry_days=config.expiry_days
    )


__all__ = [
    'MatchCacheService',
    'UserMatchCache',
    'KeyValueStore',
    'RedisKeyValueStore',
    'InMemoryKeyValueStore',
    'build_cache_service',
    'CACHE_PREFIX',
    'CACHE_EXPIRY_DAYS'
]
