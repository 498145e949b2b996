"""
MLB video URL recognition.

Validation and slug extraction share one compiled pattern so the two can
never disagree about what counts as a video URL.
"""

import re
from typing import Optional, Dict, Any


class UrlMatcher:
    """Recognizes MLB.com video URLs and extracts their slug."""

    # optional scheme, optional subdomain, literal host and /video/ segment
    URL_PATTERN = re.compile(r'(?:https?://)?(?:\w+\.)?mlb\.com/video/([^/?&#]+)')

    @classmethod
    def extract_slug(cls, url: Any) -> Optional[str]:
        """
        Extract the video slug from a URL.

        Args:
            url: Candidate URL; anything that is not a string is rejected

        Returns:
            The slug, or None if the URL is not a recognized video URL
        """
        if not url or not isinstance(url, str):
            return None

        url = url.strip()
        if not url:
            return None

        match = cls.URL_PATTERN.search(url)
        if not match:
            return None

        return match.group(1) or None

    @classmethod
    def is_valid(cls, url: Any) -> bool:
        """Check whether the URL is a recognized MLB video URL."""
        return cls.extract_slug(url) is not None

    @classmethod
    def validate(cls, url: Any) -> Dict[str, Any]:
        """Pure check returning the validity flag and slug together."""
        slug = cls.extract_slug(url)
        return {'valid': slug is not None, 'slug': slug}


def extract_slug(url: Any) -> Optional[str]:
    """Convenience function to extract a slug from a URL."""
    return UrlMatcher.extract_slug(url)


def is_valid_url(url: Any) -> bool:
    """Convenience function to validate an MLB video URL."""
    return UrlMatcher.is_valid(url)
