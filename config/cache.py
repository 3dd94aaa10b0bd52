# config/cache.py
import logging
from typing import Optional
from redis.asyncio import Redis, from_url
from redis.exceptions import RedisError
from config.settings import settings

logger = logging.getLogger(__name__)

_client: Optional[Redis] = None


async def get_redis() -> Redis:
    """
    Lazily create the shared client. Values are raw bytes; repositories decode
    their own JSON payloads.
    """
    global _client
    if _client is None:
        client = from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=False,
            socket_keepalive=True,
            socket_timeout=5.0,
            health_check_interval=30,
        )
        # Fail fast on startup if Redis is unreachable.
        await client.ping()
        _client = client
    return _client


async def redis_available() -> bool:
    try:
        r = await get_redis()
        return bool(await r.ping())
    except (RedisError, OSError) as e:
        logger.warning("redis.ping.error err=%s", type(e).__name__)
        return False


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
