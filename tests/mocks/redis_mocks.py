#!/usr/bin/env python3
"""
Redis test doubles.

FakeRedis keeps values in a dict and implements the handful of commands the
match cache store uses, so store behaviour can be tested without a server.
"""
import fnmatch
from typing import Dict, List, Optional, Tuple


class FakeRedis:
    """Dict-backed stand-in for redis.Redis(decode_responses=True)."""

    def __init__(self, page_size: int = 2):
        self.data: Dict[str, str] = {}
        self.page_size = page_size
        self.set_error: Optional[Exception] = None
        self.get_error: Optional[Exception] = None
        self.set_calls = 0

    def ping(self) -> bool:
        return True

    def get(self, key: str) -> Optional[str]:
        if self.get_error:
            raise self.get_error
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        self.set_calls += 1
        if self.set_error:
            raise self.set_error
        self.data[key] = value
        return True

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def scan(self, cursor: int = 0, match: Optional[str] = None, count: int = 10) -> Tuple[int, List[str]]:
        keys = sorted(k for k in self.data if match is None or fnmatch.fnmatchcase(k, match))
        page = keys[cursor:cursor + self.page_size]
        next_cursor = cursor + self.page_size
        if next_cursor >= len(keys):
            next_cursor = 0
        return next_cursor, page
