"""Redis connection for the persistent session backend."""

from functools import lru_cache
from urllib.parse import urlsplit, urlunsplit

import redis.asyncio as redis

from src.core.logger.logger import logger
from src.infra.config.settings import settings


def masked_redis_url(url: str) -> str:
    """Hide the password part of a redis:// URL for logging"""
    parts = urlsplit(url)
    if not parts.password:
        return url
    userinfo, _, host = parts.netloc.rpartition("@")
    username = userinfo.split(":", 1)[0]
    return urlunsplit(parts._replace(netloc=f"{username}:***@{host}"))


@lru_cache()
def get_redis_pool() -> redis.ConnectionPool:
    """Session connection pool, shared for the life of the process"""
    return redis.ConnectionPool.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        max_connections=settings.REDIS_MAX_CONNECTIONS
    )


async def get_redis() -> redis.Redis:
    """Client on the shared pool; pings so a down session backend fails startup"""
    redis_url = masked_redis_url(settings.REDIS_URL)
    client = redis.Redis(connection_pool=get_redis_pool())
    try:
        await client.ping()
    except Exception as e:
        logger.error("Session backend unreachable", extra={"redis_url": redis_url, "error": str(e)})
        raise
    logger.info("Connected to Redis session backend", extra={"redis_url": redis_url})
    return client
