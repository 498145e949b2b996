"""
Unit tests for the Redis cache manager.
Tests caching operations, TTL behavior, namespacing and statistics.
"""
import hashlib
import json
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from mlb_media.core.config import settings
from mlb_media.models.video import VideoRecord
from mlb_media.services.cache_manager import CacheManager


@pytest.fixture
def record():
    return VideoRecord(
        title="Walk-off homer",
        description="Big inning!",
        video_url="https://mlb-cuts-diamond.mlb.com/FORGE/2024/walkoff.mp4",
        poster_url="https://img.mlbstatic.com/mlb-images/image/upload/mlb/abc123poster.jpg",
        duration=47,
        date="2024-05-01T22:10:00Z",
    )


class TestCacheManager:
    """Test suite for CacheManager class."""

    @pytest.fixture
    def mock_redis(self):
        """Create a mock Redis client."""
        mock_client = AsyncMock()
        mock_client.ping = AsyncMock(return_value=True)
        mock_client.get = AsyncMock(return_value=None)
        mock_client.setex = AsyncMock(return_value=True)
        mock_client.delete = AsyncMock(return_value=1)
        mock_client.aclose = AsyncMock()
        return mock_client

    def test_initialization_defaults(self):
        manager = CacheManager()
        assert manager.redis_client is None
        assert manager.ttl == settings.cache_duration
        assert manager.prefix == settings.cache_key_prefix
        assert manager.stats == {'hits': 0, 'misses': 0, 'errors': 0, 'total_requests': 0}

    def test_cache_key_is_prefixed_md5_of_slug(self, cache):
        key = cache._generate_cache_key("abc123")
        assert key == "mlb_video_" + hashlib.md5(b"abc123").hexdigest()
        assert cache._generate_cache_key("abc123") == key
        assert cache._generate_cache_key("abc124") != key

    def test_match_pattern_escapes_glob_characters(self):
        manager = CacheManager(prefix="odd*[prefix]_")
        assert manager._match_pattern() == "odd\\*\\[prefix\\]_*"

    @pytest.mark.asyncio
    async def test_set_then_get_returns_record(self, cache, record):
        assert await cache.set("abc123", record, 3600) is True
        assert await cache.get("abc123") == record
        assert cache.stats['hits'] == 1

    @pytest.mark.asyncio
    async def test_get_miss(self, cache):
        assert await cache.get("missing") is None
        assert cache.stats['misses'] == 1
        assert cache.stats['total_requests'] == 1

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self, cache, fake_redis, record):
        with patch('mlb_media.services.cache_manager.time') as mock_time:
            mock_time.time.return_value = 1000.0
            await cache.set("abc123", record, ttl=60)
            assert fake_redis.ttls[cache._generate_cache_key("abc123")] == 60

            mock_time.time.return_value = 1059.0
            assert await cache.get("abc123") == record

            mock_time.time.return_value = 1060.0
            assert await cache.get("abc123") is None

        # expired entries are purged on read
        assert cache._generate_cache_key("abc123") not in fake_redis.store

    @pytest.mark.asyncio
    async def test_set_overwrites_existing_entry(self, cache, record):
        await cache.set("abc123", record)
        updated = record.model_copy(update={"title": "Updated"})
        await cache.set("abc123", updated)
        assert (await cache.get("abc123")).title == "Updated"

    @pytest.mark.asyncio
    async def test_set_with_non_positive_ttl_is_skipped(self, cache, fake_redis, record):
        assert await cache.set("abc123", record, ttl=0) is False
        assert fake_redis.store == {}

    @pytest.mark.asyncio
    async def test_stored_payload_shape(self, cache, fake_redis, record):
        await cache.set("abc123", record)
        entry = json.loads(fake_redis.store[cache._generate_cache_key("abc123")])
        assert entry['record']['videoUrl'] == record.video_url
        assert 'expires_at' in entry
        assert 'cached_at' in entry

    @pytest.mark.asyncio
    async def test_unreadable_entry_is_a_miss(self, cache, fake_redis):
        key = cache._generate_cache_key("abc123")
        fake_redis.store[key] = "{not json"
        assert await cache.get("abc123") is None
        assert key not in fake_redis.store

    @pytest.mark.asyncio
    async def test_delete(self, cache, record):
        await cache.set("abc123", record)
        await cache.set("def456", record)

        assert await cache.delete("abc123") is True
        assert await cache.delete("abc123") is False
        assert await cache.get("abc123") is None
        assert await cache.get("def456") == record

    @pytest.mark.asyncio
    async def test_delete_all_only_touches_namespace(self, cache, fake_redis, record):
        for slug in ("a", "b", "c"):
            await cache.set(slug, record)
        fake_redis.store["mlb_player_1"] = "unrelated"
        fake_redis.store["session:42"] = "unrelated"

        assert await cache.delete_all() == 3
        assert set(fake_redis.store) == {"mlb_player_1", "session:42"}
        assert await cache.delete_all() == 0

    @pytest.mark.asyncio
    async def test_get_redis_error(self, mock_redis):
        mock_redis.get.side_effect = Exception("Redis error")
        manager = CacheManager(redis_client=mock_redis)

        assert await manager.get("abc123") is None
        assert manager.stats['errors'] == 1
        assert manager.stats['total_requests'] == 1

    @pytest.mark.asyncio
    async def test_set_redis_error(self, mock_redis, record):
        mock_redis.setex.side_effect = Exception("Redis error")
        manager = CacheManager(redis_client=mock_redis)

        assert await manager.set("abc123", record) is False
        assert manager.stats['errors'] == 1

    @pytest.mark.asyncio
    async def test_delete_redis_error(self, mock_redis):
        mock_redis.delete.side_effect = Exception("Redis error")
        manager = CacheManager(redis_client=mock_redis)

        assert await manager.delete("abc123") is False

    @pytest.mark.asyncio
    async def test_unavailable_redis_degrades_to_miss(self, record):
        manager = CacheManager()
        with patch('redis.asyncio.from_url', side_effect=Exception("Connection failed")):
            assert await manager.get("abc123") is None
            assert await manager.set("abc123", record) is False
            assert await manager.delete("abc123") is False
            assert await manager.delete_all() == 0

    @pytest.mark.asyncio
    async def test_failed_connect_backs_off_before_retrying(self, record, monkeypatch):
        monkeypatch.setattr(settings, "redis_password", None)
        manager = CacheManager()
        with patch('redis.asyncio.from_url', side_effect=Exception("Connection failed")) as mock_from_url:
            assert await manager.get("abc123") is None
            assert await manager.set("abc123", record) is False
            assert await manager.delete("abc123") is False
            assert mock_from_url.call_count == 1

            # once the back-off window has passed a new attempt is made
            manager._retry_at = 0.0
            assert await manager.get("abc123") is None
            assert mock_from_url.call_count == 2

    @pytest.mark.asyncio
    async def test_explicit_connect_ignores_back_off(self, mock_redis):
        manager = CacheManager()
        manager._retry_at = float("inf")
        with patch('redis.asyncio.from_url', return_value=mock_redis):
            assert await manager.connect() is True
            assert manager.redis_client is mock_redis

    @pytest.mark.asyncio
    async def test_connect_success(self, mock_redis):
        manager = CacheManager()
        with patch('redis.asyncio.from_url', return_value=mock_redis):
            assert await manager.connect() is True
            assert manager.redis_client is mock_redis
            mock_redis.ping.assert_called_once()

    @pytest.mark.asyncio
    async def test_disconnect(self, mock_redis):
        manager = CacheManager(redis_client=mock_redis)
        await manager.disconnect()
        mock_redis.aclose.assert_called_once()
        assert manager.redis_client is None

    def test_get_cache_stats_with_data(self, cache):
        cache.stats = {'hits': 80, 'misses': 15, 'errors': 5, 'total_requests': 100}

        stats = cache.get_cache_stats()

        assert stats['hit_rate'] == 80.0
        assert stats['miss_rate'] == 15.0
        assert stats['error_rate'] == 5.0
        assert stats['total_requests'] == 100

        cache.reset_stats()
        assert cache.get_cache_stats()['total_requests'] == 0

    @pytest.mark.asyncio
    async def test_health_check_healthy(self, cache):
        health = await cache.health_check()
        assert health['status'] == 'healthy'
        assert health['connected'] is True

    @pytest.mark.asyncio
    async def test_health_check_ping_failure(self, mock_redis):
        mock_redis.ping.side_effect = Exception("down")
        manager = CacheManager(redis_client=mock_redis)

        health = await manager.health_check()

        assert health['status'] == 'unhealthy'
        assert health['error'] == 'down'
