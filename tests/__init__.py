#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests (unit + Redis if available)
    python -m pytest tests/ -v

    # Run only unit tests (no Redis required)
    python -m pytest tests/ -v -m "not redis"

    # Using unittest
    python -m unittest discover tests -v

Redis Setup:
    Redis tests start a throwaway container through testcontainers when
    Docker is running. To use an existing server instead, set:

    export TEST_REDIS_URL="redis://localhost:6379/1"
"""

import os

TEST_REDIS_URL = os.environ.get("TEST_REDIS_URL")

# Check if we should force skip Redis tests
SKIP_REDIS_TESTS = os.environ.get("SKIP_REDIS_TESTS", "false").lower() == "true"


def is_redis_available(url: str) -> bool:
    """Check if a Redis server answers PING at the given URL."""
    if SKIP_REDIS_TESTS:
        return False

    try:
        from redis import Redis

        client = Redis.from_url(url, socket_connect_timeout=2)
        return bool(client.ping())
    except Exception:
        return False
