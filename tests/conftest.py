"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest

from tests import SKIP_REDIS_TESTS, TEST_REDIS_URL, is_redis_available


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "redis: marks tests as requiring a Redis server (deselect with '-m \"not redis\"')"
    )


@pytest.fixture(scope="session")
def redis_url():
    """
    Session-scoped fixture that yields the URL of a disposable Redis server.

    Uses TEST_REDIS_URL when set, otherwise starts a redis:7-alpine container
    through testcontainers and stops it after all tests complete.
    """
    if SKIP_REDIS_TESTS:
        pytest.skip("SKIP_REDIS_TESTS is set")

    if TEST_REDIS_URL:
        if is_redis_available(TEST_REDIS_URL):
            yield TEST_REDIS_URL
            return
        pytest.skip("External Redis not available")

    try:
        from testcontainers.redis import RedisContainer
    except ImportError:
        pytest.skip("testcontainers not installed and TEST_REDIS_URL not set")

    container = RedisContainer(image="redis:7-alpine")
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Could not start Redis container: {e}")

    try:
        host = container.get_container_host_ip()
        port = container.get_exposed_port(6379)
        url = f"redis://{host}:{port}/0"
        print(f"\n✓ Test Redis started: {url}")
        yield url
    finally:
        container.stop()
