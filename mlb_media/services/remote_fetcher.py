"""
Remote fetcher for the MLB video data service.

This module performs the single HTTP request for a video slug. Failures are
classified and returned as FetchFailure values; nothing raised by the
transport crosses this boundary.
"""

import asyncio
import json
import logging
from typing import Dict, Any, Optional, Union
from urllib.parse import quote

import httpx

from mlb_media.core.config import settings
from mlb_media.core.exceptions import FetchFailure, FailureKind


logger = logging.getLogger(__name__)


class RemoteFetcher:
    """
    Fetches raw video metadata from the MLB data service.

    The underlying httpx client may be injected (tests pass one built on
    httpx.MockTransport); otherwise a short-lived client is opened per request.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        base_url = base_url or settings.mlb_api_base_url
        self.base_url = base_url if base_url.endswith('/') else f"{base_url}/"
        self.timeout = settings.api_timeout if timeout is None else float(timeout)
        self.user_agent = user_agent or settings.user_agent
        self._client = client

    def build_url(self, slug: str) -> str:
        """Endpoint URL for a slug; the slug is encoded as a single path segment."""
        return f"{self.base_url}{quote(slug, safe='')}"

    async def fetch(self, slug: str) -> Union[Dict[str, Any], FetchFailure]:
        """
        Fetch the raw payload for a video.

        Args:
            slug: Video slug extracted from the URL

        Returns:
            The decoded JSON object, or a FetchFailure describing what went wrong
        """
        url = self.build_url(slug)
        headers = {'User-Agent': self.user_agent, 'Accept': 'application/json'}

        try:
            # httpx times each phase separately; the overall limit is enforced here
            response = await asyncio.wait_for(self._get(url, headers), timeout=self.timeout)
        except asyncio.TimeoutError:
            return self._fail(FailureKind.TRANSPORT, slug, f"request timed out after {self.timeout}s")
        except httpx.TimeoutException as e:
            return self._fail(FailureKind.TRANSPORT, slug, f"request timed out after {self.timeout}s ({type(e).__name__})")
        except httpx.HTTPError as e:
            return self._fail(FailureKind.TRANSPORT, slug, f"{type(e).__name__}: {e}")

        if response.status_code != 200:
            return self._fail(FailureKind.STATUS, slug, response.reason_phrase, status_code=response.status_code)

        try:
            data = json.loads(response.content)
        except ValueError as e:
            return self._fail(FailureKind.JSON, slug, str(e))

        if not isinstance(data, dict):
            return self._fail(FailureKind.JSON, slug, f"expected a JSON object, got {type(data).__name__}")

        return data

    async def _get(self, url: str, headers: Dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, headers=headers, timeout=self.timeout)
        async with httpx.AsyncClient(http1=True, http2=False) as client:
            return await client.get(url, headers=headers, timeout=self.timeout)

    def _fail(
        self,
        kind: FailureKind,
        slug: str,
        detail: str,
        status_code: Optional[int] = None
    ) -> FetchFailure:
        failure = FetchFailure(kind=kind, slug=slug, detail=detail, status_code=status_code)
        logger.error(
            f"MLB API request failed: {failure.describe()}",
            extra={'slug': slug, 'failure_kind': kind.value, 'status': status_code}
        )
        return failure
