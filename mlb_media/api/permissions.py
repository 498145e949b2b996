"""
Caller capability checks for the video endpoints.

The default resolver maps the X-API-Key header onto capabilities using the
configured editor and admin keys. Hosts with their own identity layer can
replace `get_capabilities` through FastAPI dependency overrides.
"""

import secrets
from typing import Optional, Set

from fastapi import Depends, Header

from mlb_media.core.config import settings
from mlb_media.core.exceptions import ForbiddenError


EDIT_POSTS = "edit_posts"
MANAGE_OPTIONS = "manage_options"


def _matches(candidate: str, expected: Optional[str]) -> bool:
    if not expected:
        return False
    return secrets.compare_digest(candidate.encode('utf-8'), expected.encode('utf-8'))


async def get_capabilities(x_api_key: Optional[str] = Header(None)) -> Set[str]:
    """Resolve the caller's capabilities; an unset key grants nothing."""
    capabilities: Set[str] = set()
    if not x_api_key:
        return capabilities

    if _matches(x_api_key, settings.admin_api_key):
        capabilities.update({EDIT_POSTS, MANAGE_OPTIONS})
    elif _matches(x_api_key, settings.editor_api_key):
        capabilities.add(EDIT_POSTS)

    return capabilities


def require_capability(capability: str, message: str):
    """Build a dependency that rejects callers lacking `capability`."""

    async def check(capabilities: Set[str] = Depends(get_capabilities)):
        if capability not in capabilities:
            raise ForbiddenError(capability, message=message)

    return check


require_editor = require_capability(EDIT_POSTS, "You do not have permission to import videos.")
require_admin = require_capability(MANAGE_OPTIONS, "You do not have permission to manage cache.")
