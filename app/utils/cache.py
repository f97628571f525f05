import json
import logging
from typing import Any, Optional, Union

import redis

from app.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)

Key = Union[int, str]


class CacheService:
    """
    JSON cache over Redis for one kind of record.

    Entries live under `<namespace>:<key>` and expire after `ttl` seconds.
    The cache is best effort: when Redis is unavailable a read is a miss
    and a write or delete returns False, so callers fall through to the
    database.
    """

    def __init__(self, namespace: str, client: redis.Redis = None, ttl: int = None):
        self.namespace = namespace
        self.client = client or redis_client
        self.ttl = ttl or settings.CACHE_TTL

    def key_for(self, key: Key) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: Key) -> Optional[Any]:
        """Return the decoded entry, or None on a miss."""
        cache_key = self.key_for(key)
        try:
            raw = self.client.get(cache_key)
        except redis.RedisError as e:
            logger.debug(f"Cache read failed for {cache_key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.debug(f"Discarding undecodable cache entry {cache_key}")
            return None

    def set(self, key: Key, value: Any) -> bool:
        """Store `value` as JSON. Dates and other non-JSON types are str()-ed."""
        cache_key = self.key_for(key)
        try:
            self.client.setex(cache_key, self.ttl, json.dumps(value, default=str))
        except (redis.RedisError, TypeError) as e:
            logger.debug(f"Cache write failed for {cache_key}: {e}")
            return False
        return True

    def delete(self, key: Key) -> bool:
        cache_key = self.key_for(key)
        try:
            self.client.delete(cache_key)
        except redis.RedisError as e:
            logger.debug(f"Cache delete failed for {cache_key}: {e}")
            return False
        return True


product_cache = CacheService("product")
