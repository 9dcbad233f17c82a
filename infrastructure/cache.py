# ============================================================================
# REDIS CACHE CLIENT
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Infrastructure - Redis collaborator for probes and metrics
# PURPOSE: Ping and identity reporting for the key-value cache
# CREATED: 19 OCT 2026
# ============================================================================
"""
Redis Cache Client

Wraps redis.asyncio with the two things the probe service needs: a ping
for readiness and the store/driver identity for the cache_info gauge.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from core.errors import DependencyUnavailable

logger = logging.getLogger(__name__)


class RedisCacheClient:
    """Async Redis client limited to health and identity operations."""

    def __init__(
        self,
        url: str,
        driver: str = "redis",
        socket_timeout: float = 2.0,
        client: Optional[aioredis.Redis] = None,
    ):
        self.url = url
        self.driver = driver
        self._client = client or aioredis.from_url(
            url,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
        )

    @property
    def host(self) -> Optional[str]:
        return urlparse(self.url).hostname

    @property
    def store(self) -> str:
        """Class name of the underlying store client."""
        return type(self._client).__name__

    async def ping(self) -> None:
        """
        Round-trip a PING.

        Raises:
            DependencyUnavailable: If the server did not answer
        """
        try:
            await self._client.ping()
        except (RedisError, OSError) as e:
            raise DependencyUnavailable("redis", str(e)) from e

    async def close(self) -> None:
        await self._client.aclose()


__all__ = [
    "RedisCacheClient",
]
