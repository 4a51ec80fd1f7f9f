import logging
from typing import Optional, Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from research_oracle.config import get_settings
from research_oracle.db.redis.redis import get_redis_client

logger = logging.getLogger(__name__)


class RateLimiter(Protocol):
    async def allow(self, client_id: str) -> bool: ...


class NoopRateLimiter:
    """Never throttles."""

    async def allow(self, client_id: str) -> bool:
        return True


class RedisRateLimiter:
    """Fixed-window request counter per client, stored in Redis.

    The first request in a window creates the key with a TTL equal to the
    window; later requests only increment it. If Redis is unreachable the
    request is allowed.
    """

    def __init__(self, redis: Redis, limit: int, window_seconds: int = 60, prefix: str = "ratelimit:chat"):
        self.redis = redis
        self.limit = limit
        self.window_seconds = window_seconds
        self.prefix = prefix

    def key_for(self, client_id: str) -> str:
        return f"{self.prefix}:{client_id}"

    async def allow(self, client_id: str) -> bool:
        key = self.key_for(client_id)
        try:
            count = await self.redis.incr(key)
            if count == 1:
                await self.redis.expire(key, self.window_seconds)
        except RedisError as e:
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")
            return True

        if count > self.limit:
            logger.info(f"Rate limit exceeded for {client_id}: {count}/{self.limit}")
            return False
        return True


_limiter: Optional[RateLimiter] = None


def make_rate_limiter() -> RateLimiter:
    """
    Return the configured rate limiter.

    A Redis-backed limiter is used only when a per-minute budget is set.
    """
    global _limiter
    if _limiter is None:
        settings = get_settings()
        budget = settings.rate_limit.requests_per_minute
        if budget:
            _limiter = RedisRateLimiter(
                get_redis_client(),
                limit=budget,
                window_seconds=settings.rate_limit.window_seconds,
            )
            logger.info(f"Chat rate limit enabled: {budget} requests per {settings.rate_limit.window_seconds}s")
        else:
            _limiter = NoopRateLimiter()
    return _limiter
