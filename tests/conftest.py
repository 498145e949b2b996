"""
Pytest configuration and fixtures for the MLB media import test suite.

This module provides shared fixtures: an in-memory async Redis double,
sample upstream payloads and fetchers wired to httpx.MockTransport.
"""

import json
from fnmatch import fnmatchcase

import httpx
import pytest

from mlb_media.core.config import settings
from mlb_media.services.cache_manager import CacheManager
from mlb_media.services.normalizer import Normalizer
from mlb_media.services.remote_fetcher import RemoteFetcher
from mlb_media.services.video_service import VideoService


API_BASE = "https://www.mlb.com/data-service/en/videos/"
CDN_BASE = "https://img.mlbstatic.com/mlb-images/image/upload/mlb/"


class FakeRedis:
    """Dict-backed stand-in for the redis.asyncio client methods we use."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def ping(self):
        return True

    async def get(self, key):
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if key in self.store:
                del self.store[key]
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def scan_iter(self, match=None, count=None):
        for key in list(self.store):
            if match is None or fnmatchcase(key, match):
                yield key

    async def aclose(self):
        pass


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache(fake_redis):
    """CacheManager bound to the in-memory Redis double."""
    return CacheManager(redis_client=fake_redis, ttl=3600, prefix="mlb_video_")


@pytest.fixture
def sample_payload():
    """Representative MLB data-service response."""
    return {
        "title": "Walk-off homer (extended cut)",
        "description": "Big inning! #MLB #Highlights",
        "duration": 47,
        "date": "2024-05-01T22:10:00Z",
        "feeds": [
            {
                "playbacks": [
                    {"name": "mp4Avc", "url": "https://mlb-cuts-diamond.mlb.com/FORGE/2024/walkoff.mp4"}
                ],
                "image": {
                    "cuts": [
                        {"src": "https://img.mlbstatic.com/mlb-images/image/private/t_4x3/mlb/small"},
                        {"src": "https://img.mlbstatic.com/mlb-images/image/private/t_16x9/mlb/medium"},
                        {"src": "https://img.mlbstatic.com/mlb-images/image/private/t_16x9/mlb/abc123poster"}
                    ]
                }
            }
        ]
    }


@pytest.fixture
def upstream():
    """
    Programmable upstream: set `responses[slug]` to a payload, an
    httpx.Response or an exception; `calls` records requested URLs.
    """

    class Upstream:
        def __init__(self):
            self.responses = {}
            self.calls = []

        def handler(self, request: httpx.Request) -> httpx.Response:
            self.calls.append(request)
            slug = request.url.path.rsplit("/", 1)[-1]
            result = self.responses.get(slug)
            if result is None:
                return httpx.Response(404, json={"error": "not found"})
            if isinstance(result, Exception):
                raise result
            if isinstance(result, httpx.Response):
                return result
            return httpx.Response(200, content=json.dumps(result).encode())

        def client(self) -> httpx.AsyncClient:
            return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    return Upstream()


@pytest.fixture
def fetcher(upstream):
    return RemoteFetcher(base_url=API_BASE, timeout=15, client=upstream.client())


@pytest.fixture
def video_service(cache, fetcher):
    return VideoService(cache=cache, fetcher=fetcher, normalizer=Normalizer(cdn_base_url=CDN_BASE), cache_ttl=3600)


@pytest.fixture
def api_keys(monkeypatch):
    """Configure editor and admin keys for capability checks."""
    monkeypatch.setattr(settings, "editor_api_key", "editor-key")
    monkeypatch.setattr(settings, "admin_api_key", "admin-key")
    return {"editor": {"X-API-Key": "editor-key"}, "admin": {"X-API-Key": "admin-key"}}
