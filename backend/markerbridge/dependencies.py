"""
markerbridge: Route Dependencies
===================================

What:  FastAPI dependency functions that hand routes the services built by
       create_app(). Services live on app.state, one set per app instance.
"""

from fastapi import Request

from markerbridge.services.ingest_service import IngestService
from markerbridge.services.static_files import StaticFileService


def get_ui_files(request: Request) -> StaticFileService:
    return request.app.state.ui_files


def get_script_files(request: Request) -> StaticFileService:
    return request.app.state.script_files


def get_ingest_service(request: Request) -> IngestService:
    return request.app.state.ingest_service
