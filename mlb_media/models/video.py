"""
Video-related data models for the MLB media import service.

This module contains the Pydantic model for the normalized video record
handed to the editor, plus the URL validation result.
"""

from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional
import re


_ABSOLUTE_URL = re.compile(r'^https?://[^\s/?#]+', re.IGNORECASE)


class VideoRecord(BaseModel):
    """Normalized video metadata produced from an upstream payload."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str = Field("", description="Cleaned display title")
    description: str = Field("", description="Cleaned free-text description")
    video_url: str = Field(..., alias="videoUrl", description="Absolute playable media URL")
    poster_url: str = Field("", alias="posterUrl", description="Absolute poster image URL, empty if unavailable")
    duration: int = Field(0, description="Duration in seconds")
    date: str = Field("", description="Publication date as provided upstream")

    @field_validator('video_url')
    @classmethod
    def validate_video_url(cls, v):
        """A record always carries a playable absolute URL."""
        if not v or not _ABSOLUTE_URL.match(v):
            raise ValueError('Video URL must be a non-empty absolute http(s) URL')
        return v

    @field_validator('poster_url')
    @classmethod
    def validate_poster_url(cls, v):
        if v and not _ABSOLUTE_URL.match(v):
            raise ValueError('Poster URL must be empty or an absolute http(s) URL')
        return v

    @field_validator('duration')
    @classmethod
    def validate_duration(cls, v):
        if v < 0:
            raise ValueError('Duration cannot be negative')
        return v

    def to_response(self) -> dict:
        """Serialize with the camelCase keys the editor expects."""
        return self.model_dump(by_alias=True)


class UrlValidation(BaseModel):
    """Result of a pure URL check."""

    valid: bool = Field(..., description="Whether the URL is a recognized MLB video URL")
    slug: Optional[str] = Field(None, description="Extracted video slug")
