"""Fixtures and helpers for integration tests."""

import socket

import pytest


def is_service_available(host: str, port: int) -> bool:
    """Check if a service is available at host:port."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.settimeout(2)
            result = sock.connect_ex((host, port))
            return result == 0
    except OSError:
        return False


@pytest.fixture
def skip_if_no_redis():
    """Skip test if Redis is not available."""
    if not is_service_available("localhost", 6379):
        pytest.skip("Redis not available at localhost:6379")


@pytest.fixture
def redis_index(skip_if_no_redis):
    """RedisSearchIndex on a separate test database, cleaned up afterwards."""
    pytest.importorskip("redis")
    from media_index.storage.search_index.redis import RedisSearchIndex

    index = RedisSearchIndex(host="localhost", port=6379, db=15, key_prefix="media-index-test:")
    yield index

    for key in index.client.scan_iter(match="media-index-test:*"):
        index.client.delete(key)
