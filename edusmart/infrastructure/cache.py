import json
import redis
import structlog
from typing import Optional, Any
from ..config import settings

logger = structlog.get_logger()

_redis_client: Optional[redis.Redis] = None

SEARCH_PATTERN = "courses:search:*"


def search_key(query: str, limit: int, offset: int) -> str:
    return f"courses:search:{query.strip().lower()}:{limit}:{offset}"


def course_rating_key(course_id: int) -> str:
    return f"rating:course:{course_id}"


def teacher_rating_key(teacher_id: int) -> str:
    return f"rating:teacher:{teacher_id}"


def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True
        )
    return _redis_client

def get_cache(key: str) -> Optional[Any]:
    """Read a cached value; None on miss or when Redis is down."""
    try:
        client = get_redis()
        value = client.get(key)
        if value:
            return json.loads(value)
    except Exception as e:
        logger.warning("cache_unavailable", op="get", key=key, error=str(e))
    return None

def set_cache(key: str, value: Any, ttl: int = None) -> bool:
    try:
        client = get_redis()
        ttl = ttl or settings.CACHE_TTL
        client.setex(key, ttl, json.dumps(value, ensure_ascii=False, default=str))
        return True
    except Exception as e:
        logger.warning("cache_unavailable", op="set", key=key, error=str(e))
        return False

def delete_cache(key: str) -> bool:
    try:
        client = get_redis()
        client.delete(key)
        return True
    except Exception as e:
        logger.warning("cache_unavailable", op="delete", key=key, error=str(e))
        return False

def delete_cache_pattern(pattern: str) -> int:
    """Drop every key matching the pattern."""
    try:
        client = get_redis()
        keys = client.keys(pattern)
        if keys:
            return client.delete(*keys)
        return 0
    except Exception as e:
        logger.warning("cache_unavailable", op="delete_pattern", key=pattern, error=str(e))
        return 0
