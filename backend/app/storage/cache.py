"""Redis cache for last-known-good provider data.

When every live provider fails, the most recent successful answer is a
better fallback than a hardcoded constant. Successful provider results are
stored here with a TTL and read back as the second-to-last tier of a
fallback chain.

Redis is optional: if it is unreachable every operation is a no-op and
the service runs without caching.

Uses orjson for serialization.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import orjson
import redis.asyncio as redis
from pydantic import BaseModel, ValidationError
from redis.asyncio.connection import ConnectionPool

from app.config import get_settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Global connection pool
_pool: ConnectionPool | None = None
_client: redis.Redis | None = None

KEY_PREFIX_MARKET = "market:"  # Last good provider answer: market:{name}


# =============================================================================
# Connection management
# =============================================================================

async def init_cache() -> None:
    """Initialize Redis connection pool."""
    global _pool, _client

    if _client is not None:
        return

    settings = get_settings()
    if not settings.cache_enabled:
        logger.info("Redis cache disabled by configuration")
        return

    _pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=20,
        decode_responses=False,  # We handle encoding ourselves with orjson
    )
    _client = redis.Redis(connection_pool=_pool)

    # Test connection
    try:
        await _client.ping()
        logger.info("Redis connected: %s", settings.redis_url)
    except (redis.ConnectionError, OSError) as e:
        logger.warning("Redis connection failed: %s. Cache will be disabled.", e)
        await _pool.disconnect()
        _client = None
        _pool = None


async def close_cache() -> None:
    """Close Redis connection pool."""
    global _pool, _client

    if _client is not None:
        await _client.aclose()
        _client = None

    if _pool is not None:
        await _pool.disconnect()
        _pool = None

    logger.info("Redis connection closed")


def is_cache_available() -> bool:
    """Check if cache is available."""
    return _client is not None


# =============================================================================
# JSON operations (using orjson)
# =============================================================================

async def get_json(key: str) -> Any | None:
    """Get a JSON value from cache.

    Returns:
        Deserialized object, or None if missing or cache unavailable
    """
    if _client is None:
        return None

    try:
        data = await _client.get(key)
    except redis.RedisError as e:
        logger.warning("Redis GET error: %s", e)
        return None
    if data is None:
        return None

    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as e:
        logger.warning("JSON decode error for key %s: %s", key, e)
        return None


async def set_json(key: str, value: Any, ttl: int | None = None) -> bool:
    """Set a JSON value in cache.

    Args:
        key: Cache key
        value: Object to serialize and store
        ttl: Time-to-live in seconds (None for no expiry)

    Returns:
        True if successful, False otherwise
    """
    if _client is None:
        return False

    try:
        data = orjson.dumps(value)
    except (TypeError, orjson.JSONEncodeError) as e:
        logger.warning("JSON encode error for key %s: %s", key, e)
        return False

    try:
        if ttl:
            await _client.setex(key, ttl, data)
        else:
            await _client.set(key, data)
        return True
    except redis.RedisError as e:
        logger.warning("Redis SET error: %s", e)
        return False


# =============================================================================
# Last-known-good provider data
# =============================================================================

def market_key(name: str) -> str:
    return f"{KEY_PREFIX_MARKET}{name}"


async def remember(name: str, value: BaseModel) -> bool:
    """Store a successful provider result."""
    return await set_json(
        market_key(name),
        value.model_dump(mode="json"),
        ttl=get_settings().cache_ttl_seconds,
    )


async def recall(name: str, model: type[ModelT]) -> ModelT | None:
    """Read back a provider result stored by ``remember``."""
    data = await get_json(market_key(name))
    if data is None:
        return None
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning("Cached %s no longer matches %s: %s", name, model.__name__, e)
        return None


# =============================================================================
# Health check
# =============================================================================

async def ping() -> bool:
    """Check if Redis is responsive."""
    if _client is None:
        return False

    try:
        return await _client.ping()
    except redis.RedisError:
        return False
