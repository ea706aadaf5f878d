"""Redis client construction."""

from typing import Final

import redis

_CONNECT_TIMEOUT_SECONDS: Final = 5


def create_redis_client(url: str) -> redis.Redis:
    """Create a Redis client for the given URL.

    The client connects lazily; callers decide when to verify the
    connection (see ``connect()`` on the stores).

    Args:
        url: Redis URL, e.g. ``redis://localhost:6379/0``.

    Returns:
        Redis client returning ``str`` values.
    """
    return redis.Redis.from_url(
        url,
        decode_responses=True,
        socket_connect_timeout=_CONNECT_TIMEOUT_SECONDS,
    )
