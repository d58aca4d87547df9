"""
JWT revocation list.

Logged-out session ids are kept in Redis until the token would have expired
anyway, so a stolen cookie stops working at logout.
"""

from __future__ import annotations

import redis.asyncio as redis

from petconnect_server.core.config import get_settings

settings = get_settings()

_redis_pool: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    """Get or create the Redis connection."""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.from_url(settings.redis_url, decode_responses=True)
    return _redis_pool


async def close_redis() -> None:
    global _redis_pool
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None


async def revoke_jwt(jti: str, ttl_seconds: int | None = None) -> None:
    """Add a JWT ID to the revocation list."""
    conn = await get_redis()
    ttl = ttl_seconds or settings.jwt_expire_minutes * 60
    await conn.setex(f"pc:jwt:revoked:{jti}", ttl, "1")


async def is_jwt_revoked(jti: str) -> bool:
    conn = await get_redis()
    return await conn.exists(f"pc:jwt:revoked:{jti}") > 0
