"""Match Cache Service - per-user store of previously computed match scores."""
import json
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from matchscout.cache.stores import KeyValueStore
from matchscout.exceptions import CacheEntryError, StorageError, StorageQuotaExceeded
from matchscout.matching.models import CachedEntry, MatchResult, utc_now

logger = logging.getLogger(__name__)

CACHE_PREFIX = "match_cache_"
CACHE_EXPIRY_DAYS = 7

MatchCache = Dict[str, CachedEntry]


class MatchCacheService:
    """
    Service for caching match scores so jobs are not re-scored on every view.

    One stored value per user, a JSON object mapping job id to cached entry.
    Entries older than ``expiry_days`` are pruned when the user's cache is
    loaded. The service never scores jobs itself; callers recompute on a miss
    and write the result back.

    Concurrent writers for the same user are not coordinated: the last
    ``save`` wins.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key_prefix: str = CACHE_PREFIX,
        expiry_days: int = CACHE_EXPIRY_DAYS,
        clock: Callable[[], datetime] = utc_now,
        diagnostics: Optional[logging.Logger] = None
    ):
        if not key_prefix:
            raise ValueError("Match cache key prefix must not be empty")
        self.store = store
        self.key_prefix = key_prefix
        self.expiry = timedelta(days=expiry_days)
        self.clock = clock
        self.log = diagnostics or logger

    def key_for(self, user_id: str) -> str:
        """Create the storage key for a user."""
        return f"{self.key_prefix}{user_id}"

    def for_user(self, user_id: Optional[str]) -> "UserMatchCache":
        return UserMatchCache(self, user_id)

    def is_expired(self, entry: CachedEntry, now: Optional[datetime] = None) -> bool:
        now = now or self.clock()
        return now - entry.cached_at >= self.expiry

    def clear_all(self) -> int:
        """Delete every user's cache under the key prefix. Use with caution."""
        deleted = 0
        try:
            keys = list(self.store.scan_keys(self.key_prefix))
            for key in keys:
                self.store.delete(key)
                deleted += 1
            self.log.info(f"Cleared {deleted} match caches")
        except StorageError as e:
            self.log.warning(f"Error clearing match caches after {deleted} deletions: {e}")
        return deleted


class UserMatchCache:
    """
    Match cache handle bound to one user.

    With no user id every operation is a no-op returning an empty result.
    No operation raises: storage failures are logged and degrade to a cold
    cache.
    """

    def __init__(self, service: MatchCacheService, user_id: Optional[str]):
        self.service = service
        self.user_id = user_id or None

    @property
    def key(self) -> Optional[str]:
        return self.service.key_for(self.user_id) if self.user_id else None

    def _decode(self, raw: str) -> Dict[str, object]:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise CacheEntryError(f"Cache payload is not an object: {type(data).__name__}")
        return data

    def load(self) -> MatchCache:
        """Load the user's cache, pruning expired entries and persisting the pruned mapping."""
        if not self.user_id:
            return {}

        log = self.service.log
        try:
            raw = self.service.store.get(self.key)
            if not raw:
                return {}
            data = self._decode(raw)
        except (StorageError, CacheEntryError, ValueError) as e:
            log.warning(f"Error loading match cache for user {self.user_id}: {e}")
            return {}

        now = self.service.clock()
        valid: MatchCache = {}
        for job_id, payload in data.items():
            try:
                entry = CachedEntry.from_dict(payload)
            except CacheEntryError as e:
                log.debug(f"Dropping unreadable cache entry {job_id}: {e}")
                continue
            if not self.service.is_expired(entry, now):
                valid[job_id] = entry

        pruned = len(data) - len(valid)
        if pruned:
            log.debug(f"Pruned {pruned} stale match cache entries for user {self.user_id}")
            self.save(valid)

        return valid

    def save(self, entries: MatchCache) -> bool:
        """
        Overwrite the user's stored mapping.

        On a quota failure the user's stored cache is cleared and the write is
        not retried; the caller's in-memory mapping stays authoritative.
        """
        if not self.user_id:
            return False

        log = self.service.log
        payload = json.dumps({job_id: entry.to_dict() for job_id, entry in entries.items()})
        try:
            self.service.store.set(self.key, payload)
            return True
        except StorageQuotaExceeded as e:
            log.warning(f"Match cache quota exceeded for user {self.user_id}, clearing: {e}")
            self.clear()
        except StorageError as e:
            log.warning(f"Error saving match cache for user {self.user_id}: {e}")
        return False

    def get_cached_match(self, job_id: str) -> Optional[CachedEntry]:
        return self.load().get(job_id)

    def save_cached_match(self, job_id: str, result: MatchResult) -> bool:
        """Upsert one entry. Prefer a single ``save`` when scoring many jobs."""
        if not self.user_id:
            return False
        entries = self.load()
        entries[job_id] = CachedEntry.from_result(result, cached_at=self.service.clock())
        return self.save(entries)

    def invalidate_job(self, job_id: str) -> bool:
        """Remove one job's entry (e.g. after the job was edited)."""
        if not self.user_id:
            return False
        entries = self.load()
        if job_id not in entries:
            return False
        del entries[job_id]
        return self.save(entries)

    def clear(self) -> None:
        if not self.user_id:
            return
        try:
            self.service.store.delete(self.key)
        except StorageError as e:
            self.service.log.warning(f"Error clearing match cache for user {self.user_id}: {e}")
