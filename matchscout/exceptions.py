#!/usr/bin/env python3
"""
Custom exceptions for MatchScout.

Stores raise these; the cache layer catches them, logs, and degrades
to a cold cache instead of failing the caller.
"""


class MatchScoutError(Exception):
    """Base exception for MatchScout errors."""
    pass


class StorageError(MatchScoutError):
    """Raised when a key-value store operation fails."""
    pass


class StorageQuotaExceeded(StorageError):
    """Raised when the store refuses a write because it is out of space."""
    pass


class CacheEntryError(MatchScoutError):
    """Raised when a stored cache entry cannot be deserialized."""
    pass
