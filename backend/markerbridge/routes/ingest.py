"""
markerbridge: Marker Ingest Route
====================================

What:  POST /qr/{anything}. Reads the whole body, parses it as marker JSON
       and forwards {id: {x, y, r}} to the sink.

Request:
    POST /qr/abc
    {"id": "abc", "x": 1, "y": 2, "r": 3}

Responses:
    200 "success"                       mapping delivered
    500 "Invalid JSON body: ..."        InvalidBodyError (status configurable)
    413 "Payload Too Large"             only with max_body_size set
    408 "Request Timeout"               only with body_timeout set
    500 "Sink delivery failed: ..."     SinkDeliveryError

The path after /qr/ is not used; the mapping key comes from the body's id.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from markerbridge.dependencies import get_ingest_service
from markerbridge.services.ingest_service import IngestService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/qr", tags=["Ingest"])


@router.post("/{rest:path}", include_in_schema=False)
async def ingest_marker(
    request: Request,
    ingest_service: IngestService = Depends(get_ingest_service),
) -> PlainTextResponse:
    body = await ingest_service.read_body(request.stream())

    logger.debug("Received marker body: %d bytes on %s", len(body), request.url.path)

    await ingest_service.ingest(body)
    return PlainTextResponse("success")
