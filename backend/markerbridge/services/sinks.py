"""
markerbridge: Concrete Sinks
===============================

What:  Ways of getting a marker mapping out of this process.
Who:   build_sink() picks one from Settings.sink_kind when the app is created.

    stdout   → StdoutSink    (parent process reads our stdout line by line)
    log      → LoggingSink   (debugging without a host attached)
    webhook  → WebhookSink   (host exposes an HTTP endpoint)

Wire format (stdout and webhook):
    {"abc":{"x":1,"y":2,"r":3}}
"""

import json
import logging
import sys
from typing import Optional, TextIO

import httpx

from markerbridge.config import Settings
from markerbridge.exceptions import SinkDeliveryError
from markerbridge.services.sink_base import EmitSink, MarkerMapping

logger = logging.getLogger("markerbridge.sink")


def encode_mapping(mapping: MarkerMapping) -> str:
    """Compact JSON, no NaN/Infinity (they cannot arrive from a JSON body anyway)."""
    return json.dumps(mapping, separators=(",", ":"), allow_nan=False)


class StdoutSink(EmitSink):
    """
    Writes each mapping as one JSON line and flushes.

    The stream defaults to sys.stdout looked up at delivery time, so pytest's
    capsys and uvicorn's stream redirection both see the output.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    async def deliver(self, mapping: MarkerMapping) -> None:
        try:
            line = encode_mapping(mapping)
            self.stream.write(line + "\n")
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise SinkDeliveryError(str(e), context={"sink": "stdout"})


class LoggingSink(EmitSink):
    """Logs each mapping at INFO. Never fails."""

    async def deliver(self, mapping: MarkerMapping) -> None:
        logger.info("Marker mapping: %s", json.dumps(mapping))


class WebhookSink(EmitSink):
    """
    POSTs each mapping as JSON to a fixed URL.

    One attempt per mapping. Transport errors and non-2xx responses raise
    SinkDeliveryError. The httpx client is created lazily and reused for the
    life of the app.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def deliver(self, mapping: MarkerMapping) -> None:
        try:
            content = encode_mapping(mapping)
        except ValueError as e:
            raise SinkDeliveryError(str(e), context={"sink": "webhook", "url": self.url})

        client = self._get_client()
        try:
            response = await client.post(
                self.url,
                content=content,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SinkDeliveryError(
                f"host responded with {e.response.status_code}",
                context={"sink": "webhook", "url": self.url},
            )
        except httpx.HTTPError as e:
            raise SinkDeliveryError(
                str(e) or type(e).__name__,
                context={"sink": "webhook", "url": self.url},
            )
        logger.debug("Delivered mapping to %s", self.url)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def build_sink(settings: Settings) -> EmitSink:
    """
    Create the sink named by settings.sink_kind.

    Raises:
        ValueError: When the sink settings are inconsistent (see Settings.validate_sink).
    """
    settings.validate_sink()
    if settings.sink_kind == "webhook":
        return WebhookSink(settings.sink_url, timeout=settings.sink_timeout)
    if settings.sink_kind == "log":
        return LoggingSink()
    return StdoutSink()
