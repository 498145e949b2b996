"""
Error handling system for the MLB media import service.

This module provides the exception classes raised at the service boundary
and the failure values returned by the fetch and normalization stages.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for consistent error handling."""

    INVALID_URL = "invalid_url"
    FETCH_FAILED = "fetch_failed"
    FORBIDDEN = "forbidden"
    VALIDATION_ERROR = "validation_error"
    INTERNAL_ERROR = "internal_error"


class FailureKind(str, Enum):
    """Lower-level fetch failure classes, kept for diagnostics only."""

    TRANSPORT = "transport"
    STATUS = "status"
    JSON = "json"


class MediaBlockException(Exception):
    """
    Base exception class for all service errors.

    Provides structured error information including error codes,
    user-friendly messages, and actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 400,
        suggestion: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        retryable: bool = False
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Standardized error code
            status_code: HTTP status code
            suggestion: Actionable suggestion for the user
            details: Additional error details
            retryable: Whether the operation can be retried
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.suggestion = suggestion or self._get_default_suggestion()
        self.details = details or {}
        self.retryable = retryable

    def _get_default_suggestion(self) -> str:
        """Get default suggestion based on error code."""
        suggestions = {
            ErrorCode.INVALID_URL: "Please enter a valid MLB.com video URL, e.g. https://www.mlb.com/video/<slug>",
            ErrorCode.FETCH_FAILED: "The video may not exist or the MLB API may be unavailable. Please try again later",
            ErrorCode.FORBIDDEN: "Ask a site administrator for the required access",
            ErrorCode.VALIDATION_ERROR: "Please check your input and try again",
        }
        return suggestions.get(self.error_code, "Please try again or contact support if the problem persists")

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "success": False,
            "error": self.error_code.value,
            "message": self.message,
            "suggestion": self.suggestion,
            "retryable": self.retryable,
            "details": self.details
        }


class InvalidURLError(MediaBlockException):
    """Raised when the input is not a recognized MLB video URL."""

    def __init__(self, url: Any, **kwargs):
        super().__init__(
            message="Invalid MLB video URL format. Please enter a valid MLB.com video URL.",
            error_code=ErrorCode.INVALID_URL,
            status_code=400,
            **kwargs
        )
        self.details["url"] = url if isinstance(url, str) else None


class FetchFailedError(MediaBlockException):
    """Raised when video data could not be fetched or normalized."""

    def __init__(self, slug: str, reason: Optional[str] = None, **kwargs):
        super().__init__(
            message="Failed to fetch video data from MLB API. The video may not exist or the API may be unavailable.",
            error_code=ErrorCode.FETCH_FAILED,
            status_code=502,
            retryable=True,
            **kwargs
        )
        self.details["slug"] = slug
        if reason:
            self.details["reason"] = reason


class ForbiddenError(MediaBlockException):
    """Raised when the caller lacks the capability for an operation."""

    def __init__(self, capability: str, message: Optional[str] = None, **kwargs):
        super().__init__(
            message=message or "You do not have permission to perform this action.",
            error_code=ErrorCode.FORBIDDEN,
            status_code=403,
            **kwargs
        )
        self.details["capability"] = capability


class InternalError(MediaBlockException):
    """Raised for unexpected internal errors."""

    def __init__(self, reason: Optional[str] = None, **kwargs):
        message = "An internal error occurred"
        if reason:
            message += f": {reason}"

        super().__init__(
            message=message,
            error_code=ErrorCode.INTERNAL_ERROR,
            status_code=500,
            retryable=False,
            **kwargs
        )
        if reason:
            self.details["reason"] = reason


@dataclass
class FetchFailure:
    """Returned by the remote fetcher instead of raising."""

    kind: FailureKind
    slug: str
    detail: str
    status_code: Optional[int] = None

    def describe(self) -> str:
        if self.kind is FailureKind.STATUS:
            return f"{self.kind.value}: upstream returned HTTP {self.status_code}"
        return f"{self.kind.value}: {self.detail}"


@dataclass
class ValidationFailure:
    """Returned by the normalizer when the payload lacks required fields."""

    reason: str
    keys: List[str] = field(default_factory=list)

    def describe(self) -> str:
        return f"validation: {self.reason}"
