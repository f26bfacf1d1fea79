"""
Per-IP rate limiting backed by Redis

Each quota key ("bookings:<ip>", "api:<ip>") is counted in process memory and
written back to Redis every few seconds, so several workers converge on the
same count without a Redis round trip on every request.
"""

import logging
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request, status

from . import config

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None

# {key: {"count": int, "reset_time": int, "last_redis_sync": int}}
memory_cache: dict[str, dict] = {}
cache_lock = Lock()

REDIS_SYNC_INTERVAL = 10
CLEANUP_INTERVAL = 60
last_cleanup_time = 0

DEFAULT_LIMIT_MESSAGE = "Trop de requêtes depuis cette IP, réessayez plus tard."


def get_redis_client() -> redis.Redis:
    """Connect lazily on first use; the client is reused afterwards"""
    global redis_client

    if redis_client is not None:
        return redis_client

    options = {
        "decode_responses": True,
        "socket_connect_timeout": 5,
        "socket_timeout": 5,
        "retry_on_timeout": True,
        "health_check_interval": 30,
    }
    try:
        if config.REDIS_URL:
            client = redis.from_url(config.REDIS_URL, **options)
        else:
            logger.info(f"📡 Rate limit counters at {config.REDIS_HOST}:{config.REDIS_PORT}")
            client = redis.Redis(
                host=config.REDIS_HOST,
                port=config.REDIS_PORT,
                password=config.REDIS_PASSWORD,
                db=config.REDIS_DB,
                ssl=config.REDIS_SSL,
                **options,
            )
        client.ping()
    except Exception as e:
        logger.error(f"❌ Failed to connect to Redis: {e}")
        raise

    redis_client = client
    logger.info("Redis connected for rate limiting")
    return redis_client


def _fresh_entry(now: int, window_seconds: int, count: int = 0) -> dict:
    return {"count": count, "reset_time": now + window_seconds, "last_redis_sync": now}


def _load_entry(key: str, now: int, window_seconds: int, client: redis.Redis) -> dict:
    """Resume a window another worker already started, or open a new one"""
    try:
        stored = client.get(key)
        ttl = client.ttl(key)
    except Exception as e:
        logger.warning(f"⚠️ Could not read {key} from Redis, counting in memory only: {e}")
        return _fresh_entry(now, window_seconds)

    if stored and ttl > 0:
        return _fresh_entry(now, ttl, count=int(stored))
    return _fresh_entry(now, window_seconds)


def _sync_entry(key: str, entry: dict, now: int, client: redis.Redis) -> None:
    if now - entry.get("last_redis_sync", 0) < REDIS_SYNC_INTERVAL:
        return
    try:
        client.set(key, entry["count"], ex=max(1, entry["reset_time"] - now))
        entry["last_redis_sync"] = now
    except Exception as e:
        logger.warning(f"⚠️ Could not write {key} to Redis: {e}")


def cleanup_expired_cache() -> None:
    """Drop finished windows from memory, at most once per CLEANUP_INTERVAL"""
    global last_cleanup_time
    now = int(time.time())

    if now - last_cleanup_time < CLEANUP_INTERVAL:
        return

    with cache_lock:
        expired = [k for k, v in memory_cache.items() if now >= v.get("reset_time", 0)]
        for k in expired:
            del memory_cache[k]

    if expired:
        logger.debug(f"🧹 Dropped {len(expired)} expired rate limit windows")
    last_cleanup_time = now


def check_rate_limit(key: str, limit: int, window_seconds: int, redis_client: redis.Redis) -> tuple[bool, int, int]:
    """
    Count one request against `key`.

    Returns (is_allowed, count, seconds_until_reset). Any unexpected error
    denies the request.
    """
    try:
        now = int(time.time())
        cleanup_expired_cache()

        with cache_lock:
            entry = memory_cache.get(key)
            if entry is None:
                entry = memory_cache[key] = _load_entry(key, now, window_seconds, redis_client)
            elif now >= entry["reset_time"]:
                entry.update(_fresh_entry(now, window_seconds))
                entry["last_redis_sync"] = 0

            is_allowed = entry["count"] < limit
            if is_allowed:
                entry["count"] += 1

            _sync_entry(key, entry, now, redis_client)
            return is_allowed, entry["count"], max(0, entry["reset_time"] - now)

    except Exception as e:
        logger.error(f"❌ Rate limit check failed for {key}, denying: {e}")
        return False, limit, 0


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def rate_limit_dependency(
    request: Request,
    limit: int,
    window_seconds: int,
    key_prefix: str = "rate_limit",
    message: Optional[str] = None,
):
    """
    Enforce `limit` requests per `window_seconds` for the caller's IP.

    Raises HTTPException 429 (with Retry-After) once the quota is used up and
    503 when Redis cannot be reached. Does nothing when RATE_LIMIT_ENABLED is
    off.
    """
    if not config.RATE_LIMIT_ENABLED:
        return

    try:
        client = get_redis_client()
    except Exception as e:
        logger.warning("🔒 Rate limiter unavailable, denying request")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service de limitation temporairement indisponible",
        ) from e

    key = f"{key_prefix}:{get_client_ip(request)}"
    is_allowed, count, ttl = check_rate_limit(key, limit, window_seconds, client)

    if not is_allowed:
        logger.warning(f"🚫 Quota exceeded for {key} ({count}/{limit})")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=message or DEFAULT_LIMIT_MESSAGE,
            headers={"Retry-After": str(ttl)},
        )


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit", message: Optional[str] = None):
    """Build a dependency bound to one quota, for use with Depends()"""

    async def rate_limiter(request: Request):
        return await rate_limit_dependency(request, limit, window_seconds, key_prefix, message)

    return rate_limiter


# Whole API: 100 requests per 15 minutes per IP
api_rate_limit = create_rate_limiter(
    limit=config.API_RATE_LIMIT,
    window_seconds=config.API_RATE_WINDOW_SECONDS,
    key_prefix="api",
)

# Booking submissions: 5 per hour per IP
booking_rate_limit = create_rate_limiter(
    limit=config.BOOKING_RATE_LIMIT,
    window_seconds=config.BOOKING_RATE_WINDOW_SECONDS,
    key_prefix="bookings",
    message="Trop de réservations depuis cette IP, réessayez dans une heure.",
)
