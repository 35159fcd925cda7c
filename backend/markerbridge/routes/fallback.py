"""
markerbridge: Fallback Routes
================================

What:  Rejections for everything the bridge does not handle.

    POST outside /qr/   → UnknownRouteError      (404 "Not Found")
    HEAD, PUT, DELETE,
    PATCH, OPTIONS,
    TRACE               → UnsupportedMethodError (405 "Method Not Allowed")

Verbs not listed here (e.g. PROPFIND) never reach a handler: Starlette raises
its own 405, which main.py renders with the same plain-text body.
"""

from fastapi import APIRouter, Request

from markerbridge.exceptions import UnknownRouteError, UnsupportedMethodError

router = APIRouter(tags=["Fallback"])

REJECTED_METHODS = ["HEAD", "PUT", "DELETE", "PATCH", "OPTIONS", "TRACE"]


@router.post("/{path:path}", include_in_schema=False)
async def unknown_post(request: Request):
    raise UnknownRouteError(request.url.path)


@router.api_route("/{path:path}", methods=REJECTED_METHODS, include_in_schema=False)
async def unsupported_method(request: Request):
    raise UnsupportedMethodError(request.method)
