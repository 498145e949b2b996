"""
Video import API endpoints.

This module provides the import, validate and cache-clearing endpoints
consumed by the editor UI.
"""

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from mlb_media.api.permissions import require_admin, require_editor
from mlb_media.models.video import VideoRecord, UrlValidation
from mlb_media.services.video_service import VideoService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mlb-media-block/v1", tags=["videos"])


class ImportRequest(BaseModel):
    """Request model for the import endpoint."""

    url: str = Field(..., description="MLB video URL to import", max_length=2048)


class ClearCacheRequest(BaseModel):
    """Optional JSON body for the cache endpoint."""

    slug: Optional[str] = Field(None, description="Slug to clear; omit to clear everything")


class ClearCacheResponse(BaseModel):
    """Response model for the cache endpoint."""

    success: bool = Field(True)
    cleared: int = Field(..., description="Number of cache entries removed")
    message: str = Field(...)


class ErrorResponse(BaseModel):
    """Error response model."""

    success: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    suggestion: Optional[str] = Field(None, description="Suggested action for the user")


def get_video_service(request: Request) -> VideoService:
    """Dependency returning the application's shared VideoService."""
    return request.app.state.video_service


@router.post(
    "/import",
    response_model=VideoRecord,
    response_model_by_alias=True,
    responses={
        200: {"description": "Video imported"},
        400: {"model": ErrorResponse, "description": "Invalid MLB video URL"},
        403: {"model": ErrorResponse, "description": "Caller cannot edit posts"},
        502: {"model": ErrorResponse, "description": "MLB API fetch failed"}
    },
    dependencies=[Depends(require_editor)],
    summary="Import video data from an MLB URL"
)
async def import_video(
    payload: ImportRequest,
    service: VideoService = Depends(get_video_service)
) -> JSONResponse:
    """Fetch (or serve from cache) the normalized record for a video URL."""
    slug, record = await service.import_with_slug(payload.url)

    return JSONResponse(
        status_code=200,
        content=record.to_response(),
        headers={"X-MLB-Video-Slug": quote(slug, safe='')}
    )


@router.get(
    "/validate",
    response_model=UrlValidation,
    dependencies=[Depends(require_editor)],
    summary="Check whether a URL is an MLB video URL"
)
async def validate_url(
    url: str = Query("", description="MLB video URL to validate"),
    service: VideoService = Depends(get_video_service)
) -> UrlValidation:
    return UrlValidation(**service.validate_url(url))


@router.delete(
    "/cache",
    response_model=ClearCacheResponse,
    dependencies=[Depends(require_admin)],
    summary="Clear cached video data"
)
async def clear_cache(
    slug: Optional[str] = Query(None, description="Slug to clear; omit to clear everything"),
    body: Optional[ClearCacheRequest] = Body(None),
    service: VideoService = Depends(get_video_service)
) -> ClearCacheResponse:
    if slug is None and body is not None:
        slug = body.slug
    slug = slug.strip() if slug else None

    count = await service.clear_cache(slug)
    logger.info(f"Cleared {count} cached video(s)", extra={"slug": slug})

    noun = "entry" if count == 1 else "entries"
    return ClearCacheResponse(cleared=count, message=f"Cleared {count} cache {noun}.")
