"""
Redis caching layer for normalized video records.
Provides TTL-based caching keyed by video slug with namespaced invalidation.
"""
import json
import hashlib
import logging
import time
from typing import Optional, Dict, Any, Union
from datetime import datetime, timezone
import redis.asyncio as redis
from pydantic import ValidationError

from mlb_media.core.config import settings
from mlb_media.models.video import VideoRecord


logger = logging.getLogger(__name__)


class CacheManager:
    """
    Redis-based cache for video records.

    Features:
    - Per-entry expiry, enforced by Redis and re-checked on read
    - Keys namespaced by a fixed prefix so bulk deletes never touch
      unrelated data sharing the same Redis database
    - Hit/miss tracking for performance monitoring
    - Store failures degrade to cache misses instead of raising
    """

    SCAN_BATCH_SIZE = 500
    RECONNECT_BACKOFF = 30  # seconds between reconnect attempts after a failure

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        ttl: Optional[int] = None,
        prefix: Optional[str] = None
    ):
        self.redis_client = redis_client
        self.ttl = settings.cache_duration if ttl is None else ttl
        self.prefix = settings.cache_key_prefix if prefix is None else prefix
        self._retry_at = 0.0

        # Performance tracking
        self.stats = {
            'hits': 0,
            'misses': 0,
            'errors': 0,
            'total_requests': 0
        }

    async def connect(self) -> bool:
        """
        Establish Redis connection with error handling.

        Returns:
            bool: True if connection successful, False otherwise
        """
        try:
            if settings.redis_password:
                self.redis_client = redis.Redis(
                    host=settings.redis_host,
                    port=settings.redis_port,
                    db=settings.redis_db,
                    password=settings.redis_password,
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5
                )
            else:
                self.redis_client = redis.from_url(
                    settings.redis_url,
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5
                )

            await self.redis_client.ping()
            return True

        except Exception as e:
            logger.warning(f"Redis connection failed: {e}")
            self.redis_client = None
            self._retry_at = time.monotonic() + self.RECONNECT_BACKOFF
            return False

    async def disconnect(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None

    async def _ensure_client(self) -> bool:
        if not self.redis_client and time.monotonic() >= self._retry_at:
            await self.connect()
        return self.redis_client is not None

    def _generate_cache_key(self, slug: str) -> str:
        """
        Generate the namespaced cache key for a slug.

        The slug is hashed so arbitrary upstream slugs map to fixed-length,
        glob-safe keys.
        """
        return f"{self.prefix}{hashlib.md5(slug.encode('utf-8')).hexdigest()}"

    def _match_pattern(self) -> str:
        """SCAN pattern matching every key in this cache's namespace."""
        escaped = ''.join('\\' + ch if ch in '*?[]\\' else ch for ch in self.prefix)
        return f"{escaped}*"

    async def get(self, slug: str) -> Optional[VideoRecord]:
        """
        Retrieve a cached video record.

        Args:
            slug: Video slug

        Returns:
            The cached VideoRecord, or None on a miss or expired entry
        """
        if not await self._ensure_client():
            self.stats['errors'] += 1
            return None

        self.stats['total_requests'] += 1
        cache_key = self._generate_cache_key(slug)

        try:
            cached_data = await self.redis_client.get(cache_key)
        except Exception as e:
            logger.warning(f"Cache get error: {e}", extra={'slug': slug})
            self.stats['errors'] += 1
            return None

        if not cached_data:
            self.stats['misses'] += 1
            return None

        try:
            entry = json.loads(cached_data)
            expires_at = float(entry['expires_at'])
            record = VideoRecord.model_validate(entry['record'])
        except (ValueError, TypeError, KeyError, ValidationError) as e:
            logger.warning(f"Discarding unreadable cache entry: {e}", extra={'slug': slug})
            await self._purge(cache_key)
            self.stats['misses'] += 1
            return None

        if expires_at <= time.time():
            await self._purge(cache_key)
            self.stats['misses'] += 1
            return None

        self.stats['hits'] += 1
        return record

    async def set(self, slug: str, record: VideoRecord, ttl: Optional[int] = None) -> bool:
        """
        Cache a video record, replacing any existing entry for the slug.

        Args:
            slug: Video slug
            record: Normalized record to store
            ttl: Lifetime in seconds, defaults to the configured duration

        Returns:
            bool: True if cached successfully, False otherwise
        """
        ttl = self.ttl if ttl is None else int(ttl)
        if ttl <= 0:
            return False

        if not await self._ensure_client():
            return False

        cache_key = self._generate_cache_key(slug)
        entry = {
            'record': record.to_response(),
            'expires_at': time.time() + ttl,
            'cached_at': datetime.now(timezone.utc).isoformat()
        }

        try:
            await self.redis_client.setex(cache_key, ttl, json.dumps(entry))
            return True
        except Exception as e:
            logger.warning(f"Cache set error: {e}", extra={'slug': slug})
            self.stats['errors'] += 1
            return False

    async def delete(self, slug: str) -> bool:
        """
        Remove the cached entry for one slug.

        Returns:
            bool: True if an entry was removed
        """
        if not await self._ensure_client():
            return False

        try:
            deleted = await self.redis_client.delete(self._generate_cache_key(slug))
            return bool(deleted)
        except Exception as e:
            logger.warning(f"Cache delete error: {e}", extra={'slug': slug})
            self.stats['errors'] += 1
            return False

    async def delete_all(self) -> int:
        """
        Remove every entry in this cache's namespace.

        Returns:
            int: Number of keys deleted
        """
        if not await self._ensure_client():
            return 0

        deleted = 0
        batch = []
        try:
            async for key in self.redis_client.scan_iter(match=self._match_pattern(), count=self.SCAN_BATCH_SIZE):
                if isinstance(key, bytes):
                    key = key.decode('utf-8')
                if not key.startswith(self.prefix):
                    continue
                batch.append(key)
                if len(batch) >= self.SCAN_BATCH_SIZE:
                    deleted += await self.redis_client.delete(*batch)
                    batch = []
            if batch:
                deleted += await self.redis_client.delete(*batch)
            return deleted

        except Exception as e:
            logger.warning(f"Cache invalidation error: {e}")
            self.stats['errors'] += 1
            return deleted

    async def _purge(self, cache_key: str):
        try:
            await self.redis_client.delete(cache_key)
        except Exception as e:
            logger.debug(f"Failed to purge expired entry {cache_key}: {e}")

    def get_cache_stats(self) -> Dict[str, Union[int, float]]:
        """
        Get cache performance statistics.

        Returns:
            Dict containing cache hit rate, miss rate, and error rate
        """
        total = self.stats['total_requests']

        if total == 0:
            return {
                'hit_rate': 0.0,
                'miss_rate': 0.0,
                'error_rate': 0.0,
                'total_requests': 0,
                'hits': 0,
                'misses': 0,
                'errors': self.stats['errors']
            }

        return {
            'hit_rate': round((self.stats['hits'] / total) * 100, 2),
            'miss_rate': round((self.stats['misses'] / total) * 100, 2),
            'error_rate': round((self.stats['errors'] / total) * 100, 2),
            'total_requests': total,
            'hits': self.stats['hits'],
            'misses': self.stats['misses'],
            'errors': self.stats['errors']
        }

    def reset_stats(self):
        """Reset performance statistics."""
        self.stats = {
            'hits': 0,
            'misses': 0,
            'errors': 0,
            'total_requests': 0
        }

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform Redis health check.

        Returns:
            Dict containing health status and connection info
        """
        try:
            if not await self._ensure_client():
                return {
                    'status': 'unhealthy',
                    'connected': False,
                    'error': 'No Redis connection'
                }

            start_time = time.time()
            await self.redis_client.ping()
            response_time = (time.time() - start_time) * 1000  # ms

            return {
                'status': 'healthy',
                'connected': True,
                'response_time_ms': round(response_time, 2),
                'cache_stats': self.get_cache_stats()
            }

        except Exception as e:
            return {
                'status': 'unhealthy',
                'connected': False,
                'error': str(e)
            }
