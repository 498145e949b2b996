"""
Services package for the MLB media import service.

This package contains the video import pipeline: URL recognition, caching,
remote fetching, normalization and the orchestrating service.
"""

from .url_matcher import (
    UrlMatcher,
    extract_slug,
    is_valid_url,
)

from .cache_manager import CacheManager

from .remote_fetcher import RemoteFetcher

from .normalizer import (
    Normalizer,
    normalize,
)

from .video_service import VideoService

__all__ = [
    # URL recognition
    'UrlMatcher',
    'extract_slug',
    'is_valid_url',
    # Caching
    'CacheManager',
    # Fetching and normalization
    'RemoteFetcher',
    'Normalizer',
    'normalize',
    # Orchestration
    'VideoService',
]
