"""
Normalization of raw MLB data-service payloads into VideoRecord objects.

The only hard requirement on the payload is a playable URL at
feeds[0].playbacks[0].url; every other field degrades to an empty value.
"""

import logging
import math
import re
from typing import Any, Dict, Optional, Union
from urllib.parse import quote, urlsplit

from bs4 import BeautifulSoup
from pydantic import ValidationError

from mlb_media.core.config import settings
from mlb_media.core.exceptions import ValidationFailure
from mlb_media.models.video import VideoRecord


logger = logging.getLogger(__name__)


PARENTHETICAL_PATTERN = re.compile(r'\([^)]+\)')
HASHTAG_PATTERN = re.compile(r'#\w+')
WHITESPACE_PATTERN = re.compile(r'\s+')
LEADING_INT_PATTERN = re.compile(r'^\s*[+-]?\d+')
SCHEME_PATTERN = re.compile(r'^([a-zA-Z][a-zA-Z0-9+.-]*):')
CONTROL_CHARS_PATTERN = re.compile(r'[\x00-\x1f\x7f]')

ALLOWED_SCHEMES = ('http', 'https')
URL_SAFE_CHARS = ":/?#[]@!$&'()*+,;=%~"


def dig(data: Any, *path: Union[str, int]) -> Any:
    """Walk nested dicts/lists, returning None as soon as a step is missing."""
    current = data
    for step in path:
        if isinstance(step, int) and isinstance(current, list):
            if step >= len(current):
                return None
            current = current[step]
        elif isinstance(current, dict):
            if step not in current:
                return None
            current = current[step]
        else:
            return None
    return current


def as_text(value: Any) -> str:
    """Coerce scalar payload values to text; containers and None become ''."""
    if value is None or isinstance(value, bool):
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return ''


def strip_tags(text: str) -> str:
    """Remove markup and decode entities, dropping script and style bodies entirely."""
    if not text:
        return ''
    soup = BeautifulSoup(text, 'html.parser')
    for tag in soup(['script', 'style']):
        tag.decompose()
    return soup.get_text()


def sanitize_text(value: Any) -> str:
    """Plain single-line text: markup stripped, whitespace collapsed."""
    text = strip_tags(as_text(value))
    return WHITESPACE_PATTERN.sub(' ', text).strip()


def sanitize_url(value: Any) -> str:
    """
    Turn an upstream URL into a safe absolute http(s) URL.

    Returns '' when the value cannot be made into one (empty input, a
    non-http scheme such as javascript: or data:, or a missing host).
    """
    url = as_text(value).strip()
    if not url:
        return ''

    url = CONTROL_CHARS_PATTERN.sub('', url.replace(' ', '%20'))

    if url.startswith('//'):
        url = f"https:{url}"

    match = SCHEME_PATTERN.match(url)
    if match and '.' not in match.group(1):
        if match.group(1).lower() not in ALLOWED_SCHEMES:
            return ''
    elif not url.startswith(('/', '?', '#')):
        url = f"http://{url}"
    else:
        return ''

    url = quote(url, safe=URL_SAFE_CHARS)
    if not urlsplit(url).netloc:
        return ''
    return url


def to_duration(value: Any) -> int:
    """Non-negative whole seconds; 0 for anything that is not number-like."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return abs(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return abs(int(value))
    if isinstance(value, str):
        match = LEADING_INT_PATTERN.match(value)
        if match:
            return abs(int(match.group(0)))
    return 0


class Normalizer:
    """Validates raw payloads and builds cleaned VideoRecord objects."""

    def __init__(self, cdn_base_url: Optional[str] = None):
        self.cdn_base_url = cdn_base_url or settings.mlb_cdn_base_url

    def normalize(self, raw: Dict[str, Any]) -> Union[VideoRecord, ValidationFailure]:
        """
        Build a VideoRecord from a raw payload.

        Args:
            raw: Decoded JSON object from the MLB data service

        Returns:
            VideoRecord, or ValidationFailure when no playable URL is present
        """
        keys = list(raw.keys()) if isinstance(raw, dict) else []

        playback_url = dig(raw, 'feeds', 0, 'playbacks', 0, 'url')
        if not isinstance(playback_url, str) or not playback_url.strip():
            return self._fail('missing feeds[0].playbacks[0].url', keys)

        video_url = sanitize_url(playback_url)
        if not video_url:
            return self._fail('feeds[0].playbacks[0].url is not a usable http(s) URL', keys)

        try:
            return VideoRecord(
                title=self.clean_title(dig(raw, 'title')),
                description=self.clean_description(dig(raw, 'description')),
                video_url=video_url,
                poster_url=self.build_poster_url(dig(raw, 'feeds', 0, 'image', 'cuts', 2, 'src')),
                duration=to_duration(dig(raw, 'duration')),
                date=sanitize_text(dig(raw, 'date')),
            )
        except ValidationError as e:
            return self._fail(f"record rejected: {e.error_count()} invalid field(s)", keys)

    @staticmethod
    def clean_title(title: Any) -> str:
        """Drop parenthetical asides and markup from a title."""
        cleaned = PARENTHETICAL_PATTERN.sub('', as_text(title))
        return strip_tags(cleaned).strip()

    @staticmethod
    def clean_description(description: Any) -> str:
        """Drop hashtags and markup from a description."""
        cleaned = HASHTAG_PATTERN.sub('', as_text(description))
        return strip_tags(cleaned).strip()

    def build_poster_url(self, image_path: Any) -> str:
        """Map an image cut path onto the CDN poster URL, '' if there is none."""
        path = as_text(image_path).strip()
        if not path:
            return ''

        basename = path.rstrip('/').rsplit('/', 1)[-1]
        if not basename:
            return ''

        return sanitize_url(f"{self.cdn_base_url}{basename}.jpg")

    def _fail(self, reason: str, keys) -> ValidationFailure:
        failure = ValidationFailure(reason=reason, keys=keys)
        logger.error(f"Missing required fields in API response: {reason}", extra={'keys': keys})
        return failure


def normalize(raw: Dict[str, Any]) -> Union[VideoRecord, ValidationFailure]:
    """Convenience function using the configured CDN base."""
    return Normalizer().normalize(raw)
