"""
markerbridge: Static Asset Route
===================================

What:  GET for every path. Picks an asset root and returns the file bytes.

Root selection:
    The raw request target (path plus "?query" when present) is checked for a
    ".js" suffix. A match is served from the script root, anything else from
    the UI root. It is a plain suffix test, so /foo/bar.js also comes from
    the script root, while /app.js?v=2 goes to the UI root.

    Neither the suffix test nor the file lookup percent-decodes the path, so
    /x%2Ejs goes to the UI root and /a%20b.html names the file "a%20b.html".

Errors (handled globally in main.py):
    AssetNotFoundError → 404
    AssetReadError     → 500
"""

import logging

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from markerbridge.dependencies import get_script_files, get_ui_files
from markerbridge.middleware.logging import request_path, request_target
from markerbridge.services.static_files import StaticFileService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Assets"])

SCRIPT_SUFFIX = ".js"


@router.get("/{path:path}", include_in_schema=False)
async def serve_asset(
    request: Request,
    ui_files: StaticFileService = Depends(get_ui_files),
    script_files: StaticFileService = Depends(get_script_files),
) -> Response:
    """Serve one file from the root chosen by the request suffix."""
    if request_target(request).endswith(SCRIPT_SUFFIX):
        files = script_files
    else:
        files = ui_files

    asset = await files.serve(request_path(request))

    # Content-Type set as a header (not media_type) so no charset is appended
    return Response(content=asset.content, headers={"Content-Type": asset.content_type})
