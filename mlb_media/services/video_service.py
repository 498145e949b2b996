"""
Video import pipeline for the MLB media block.

URL -> slug -> cache lookup -> remote fetch -> normalize -> cache populate.
A cache hit short-circuits everything after the lookup. No retries are made;
a failed fetch is reported immediately and the caller decides what to do.
"""

import logging
from typing import Dict, Any, Optional, Tuple

from mlb_media.core.config import settings
from mlb_media.core.exceptions import (
    InvalidURLError, FetchFailedError, FetchFailure, ValidationFailure
)
from mlb_media.models.video import VideoRecord
from mlb_media.services.cache_manager import CacheManager
from mlb_media.services.normalizer import Normalizer
from mlb_media.services.remote_fetcher import RemoteFetcher
from mlb_media.services.url_matcher import UrlMatcher


logger = logging.getLogger(__name__)


class VideoService:
    """
    Entry point used by the HTTP layer.

    One instance is built at application startup and shared by reference;
    it holds no per-request state and performs no authorization checks.
    """

    def __init__(
        self,
        cache: Optional[CacheManager] = None,
        fetcher: Optional[RemoteFetcher] = None,
        normalizer: Optional[Normalizer] = None,
        cache_ttl: Optional[int] = None
    ):
        self.cache = cache or CacheManager()
        self.fetcher = fetcher or RemoteFetcher()
        self.normalizer = normalizer or Normalizer()
        self.cache_ttl = settings.cache_duration if cache_ttl is None else cache_ttl

    async def import_by_url(self, url: str) -> VideoRecord:
        """
        Import a video record from an MLB video URL.

        Raises:
            InvalidURLError: If the URL is not a recognized MLB video URL
            FetchFailedError: If the upstream fetch or normalization failed
        """
        _, record = await self.import_with_slug(url)
        return record

    async def import_with_slug(self, url: str) -> Tuple[str, VideoRecord]:
        """Same as import_by_url, also returning the extracted slug."""
        slug = UrlMatcher.extract_slug(url)
        if slug is None:
            raise InvalidURLError(url)

        cached = await self.cache.get(slug)
        if cached is not None:
            logger.info(f"Cache hit for video {slug}")
            return slug, cached

        logger.info(f"Cache miss for video {slug}, fetching from MLB API")
        raw = await self.fetcher.fetch(slug)
        if isinstance(raw, FetchFailure):
            raise FetchFailedError(slug, reason=raw.describe())

        record = self.normalizer.normalize(raw)
        if isinstance(record, ValidationFailure):
            raise FetchFailedError(slug, reason=record.describe())

        if not await self.cache.set(slug, record, self.cache_ttl):
            logger.warning(f"Failed to cache video {slug}")

        return slug, record

    def validate_url(self, url: Any) -> Dict[str, Any]:
        """Pure URL check; never touches the network or the cache."""
        return UrlMatcher.validate(url)

    async def clear_cache(self, slug: Optional[str] = None) -> int:
        """
        Clear one cached video, or every cached video when no slug is given.

        Returns:
            int: Number of entries removed
        """
        if slug:
            return 1 if await self.cache.delete(slug) else 0
        return await self.cache.delete_all()
