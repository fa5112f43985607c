from redis.asyncio import Redis
from redis.exceptions import RedisError

from teamquiz.core.config import settings
from teamquiz.core.errors import UnavailableError

_redis: Redis | None = None


async def get_redis() -> Redis:
    """
    Returns the singleton Redis client. Supports TLS through the rediss://
    scheme and is tuned for managed providers (Upstash, Redis Cloud).
    """
    global _redis
    if _redis is None:
        client = Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            health_check_interval=30,
            socket_timeout=3,
            socket_connect_timeout=3,
            retry_on_timeout=True,
            max_connections=50,
        )
        # fail fast when the server is unreachable
        try:
            await client.ping()
        except RedisError as exc:
            await client.aclose()
            raise UnavailableError(f"Redis is unreachable: {exc}") from exc
        _redis = client
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None
