# src/services/redis_cache.py
# Responsibility: Redis-backed response cache used by the HTTP layer around search endpoints.

import hashlib
import json
import logging
from typing import Any, Dict, Optional

import redis

from src.config.settings import settings

logger = logging.getLogger(__name__)


class RedisCacheManager:
    """
    Caches search responses in Redis to absorb repeated autosuggest keystrokes.
    Any Redis problem is treated as a cache miss; search never fails because of the cache.
    """

    def __init__(self, client: Optional[redis.Redis] = None, ttl_seconds: Optional[int] = None):
        """
        decode_responses=True ensures we get strings back, not bytes.
        """
        self.client = client or redis.from_url(settings.REDIS.URL, decode_responses=True)
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.REDIS.TTL_SECONDS

    def get_cached_result(self, namespace: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Retrieves a cached response.

        Args:
            namespace (str): Endpoint name, e.g. "suggestions".
            params (dict): Normalized request parameters.

        Returns:
            Optional[Dict]: The cached response, or None on miss.
        """
        cache_key = self._generate_key(namespace, params)
        try:
            cached_data = self.client.get(cache_key)
            if cached_data:
                return json.loads(cached_data)
        except (redis.RedisError, json.JSONDecodeError) as e:
            logger.warning("[Redis] Cache fetch error: %s", e)

        return None

    def set_cached_result(self, namespace: str, params: Dict[str, Any], result: Dict[str, Any]) -> None:
        """
        Stores a response with the configured TTL.
        """
        cache_key = self._generate_key(namespace, params)
        try:
            json_data = json.dumps(result, default=str)
            self.client.setex(cache_key, self.ttl_seconds, json_data)
        except (redis.RedisError, TypeError) as e:
            logger.warning("[Redis] Cache write error: %s", e)

    def _generate_key(self, namespace: str, params: Dict[str, Any]) -> str:
        """
        Generates a deterministic cache key.

        Key Format: "search:{namespace}:{sha256_hash}"
        """
        # sort_keys=True keeps the hash stable across dict orderings
        serialized_payload = json.dumps(params, sort_keys=True, ensure_ascii=False)
        hash_digest = hashlib.sha256(serialized_payload.encode('utf-8')).hexdigest()

        return f"search:{namespace}:{hash_digest}"


class NullCacheManager:
    """Stand-in used when response caching is disabled in settings."""

    def get_cached_result(self, namespace: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return None

    def set_cached_result(self, namespace: str, params: Dict[str, Any], result: Dict[str, Any]) -> None:
        return None
