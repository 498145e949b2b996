"""
Data models package for the MLB media import service.
"""

from .video import VideoRecord, UrlValidation

__all__ = [
    'VideoRecord',
    'UrlValidation',
]
