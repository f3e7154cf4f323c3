"""Optional Redis client.

LoomeroFlow runs without Redis: rate limiting and email throttling simply
turn off. Callers that can use it ask for ``get_redis_or_none()``.
"""

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

logger = structlog.get_logger()

_client: redis.Redis | None = None


async def connect_redis(url: str) -> bool:
    """Open the client and ping it. Returns False and stays disconnected on failure."""
    global _client  # noqa: PLW0603
    client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=10,
    )
    try:
        await client.ping()
    except (RedisError, OSError):
        logger.warning("redis_unavailable", url=url, exc_info=True)
        await client.aclose()
        return False
    _client = client
    logger.info("redis_connected", url=url)
    return True


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis_or_none() -> redis.Redis | None:
    return _client


async def redis_status() -> str:
    """Readiness value for Redis: ``ok``, ``disabled`` or ``error: ...``."""
    if _client is None:
        return "disabled"
    try:
        await _client.ping()
    except (RedisError, OSError) as exc:
        return f"error: {exc}"
    return "ok"
