"""
markerbridge: Ingest Service
===============================

What:  Turns a POST /qr/* body into a marker mapping and hands it to the sink.
How:   accumulate body chunks → decode UTF-8 → json.loads → MarkerPayload →
       {id: {x, y, r}} → sink.deliver().
Who:   Called by routes/ingest.py.

Limits:
    max_body_size  None → unbounded. Otherwise PayloadTooLargeError (413) as
                   soon as the running total passes the limit.
    body_timeout   None → wait for the body forever. Otherwise
                   BodyTimeoutError (408) when the stream has not ended in time.
"""

import asyncio
import json
import logging
import math
from typing import AsyncIterator, Optional

from pydantic import ValidationError

from markerbridge.exceptions import (
    BodyTimeoutError,
    InvalidBodyError,
    PayloadTooLargeError,
)
from markerbridge.schemas.marker import MarkerPayload
from markerbridge.services.sink_base import EmitSink, MarkerMapping

logger = logging.getLogger(__name__)


def _reject_constant(name: str):
    # json.loads accepts NaN and Infinity by default; JSON does not
    raise ValueError(f"Unexpected token {name}")


def _finite_float(text: str) -> float:
    # 1e400 parses to inf, which no sink can encode back to JSON
    value = float(text)
    if math.isinf(value) or math.isnan(value):
        raise ValueError(f"Number {text} is out of range")
    return value


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "body"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


class IngestService:
    """
    Parses marker bodies and forwards them.

    One instance per app. Holds no per-request state: every call builds its
    own buffer, payload and mapping.
    """

    def __init__(
        self,
        sink: EmitSink,
        max_body_size: Optional[int] = None,
        body_timeout: Optional[float] = None,
        invalid_body_status: int = 500,
    ):
        self.sink = sink
        self.max_body_size = max_body_size
        self.body_timeout = body_timeout
        self.invalid_body_status = invalid_body_status

    async def read_body(self, chunks: AsyncIterator[bytes]) -> bytes:
        """
        Collect the body stream in arrival order and join it once it ends.

        Raises:
            PayloadTooLargeError: Running size passed max_body_size.
            BodyTimeoutError: Stream did not end within body_timeout.
        """
        if self.body_timeout is None:
            return await self._accumulate(chunks)
        try:
            return await asyncio.wait_for(self._accumulate(chunks), timeout=self.body_timeout)
        except asyncio.TimeoutError:
            logger.warning("Request body not complete after %.1fs", self.body_timeout)
            raise BodyTimeoutError(self.body_timeout)

    async def _accumulate(self, chunks: AsyncIterator[bytes]) -> bytes:
        body = []
        size = 0
        async for chunk in chunks:
            if not chunk:
                continue
            size += len(chunk)
            if self.max_body_size is not None and size > self.max_body_size:
                raise PayloadTooLargeError(self.max_body_size, context={"received": size})
            body.append(chunk)
        return b"".join(body)

    def parse(self, body: bytes) -> MarkerPayload:
        """
        Decode and validate a marker body.

        Raises:
            InvalidBodyError: Not UTF-8, not JSON, or missing id/x/y/r.
        """
        try:
            text = body.decode("utf-8")
            data = json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
        except (UnicodeDecodeError, ValueError) as e:
            raise InvalidBodyError(
                str(e), status_code=self.invalid_body_status, context={"size": len(body)}
            )

        if not isinstance(data, dict):
            raise InvalidBodyError(
                f"expected a JSON object, got {type(data).__name__}",
                status_code=self.invalid_body_status,
            )

        try:
            return MarkerPayload.model_validate(data)
        except ValidationError as e:
            raise InvalidBodyError(
                _describe_validation_error(e),
                status_code=self.invalid_body_status,
                context={"keys": sorted(data.keys())},
            )

    async def ingest(self, body: bytes) -> MarkerMapping:
        """
        Parse one body and deliver its mapping to the sink.

        Returns:
            The mapping that was delivered.

        Raises:
            InvalidBodyError: Body rejected; the sink is not called.
            SinkDeliveryError: The sink failed.
        """
        payload = self.parse(body)
        mapping = payload.to_mapping()
        await self.sink.deliver(mapping)
        logger.debug("Forwarded marker %s", payload.key)
        return mapping
