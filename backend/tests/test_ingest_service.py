"""
markerbridge: Ingest Service Unit Tests
==========================================

What:  Tests for IngestService body accumulation, parsing and forwarding.
How:   Feeds byte chunks from async generators and records sink deliveries.

What we test:
    ✅ Chunks are joined in arrival order
    ✅ Body size limit (unset = unbounded)
    ✅ Body timeout
    ✅ Valid payloads become {id: {x, y, r}} with values passed through
    ✅ Malformed JSON, non-objects and missing fields raise InvalidBodyError
    ✅ Rejected bodies never reach the sink
"""

import asyncio

import pytest

from markerbridge.exceptions import (
    BodyTimeoutError,
    InvalidBodyError,
    PayloadTooLargeError,
    SinkDeliveryError,
)
from markerbridge.services.ingest_service import IngestService
from markerbridge.services.sink_base import EmitSink


async def stream_of(*chunks):
    for chunk in chunks:
        yield chunk


class FailingSink(EmitSink):
    async def deliver(self, mapping):
        raise SinkDeliveryError("host unavailable")


class TestReadBody:
    """Tests for body accumulation and limits."""

    @pytest.mark.asyncio
    async def test_joins_chunks_in_order(self, recording_sink):
        service = IngestService(recording_sink)
        body = await service.read_body(stream_of(b'{"id":', b'"a",', b"", b'"x":1}'))
        assert body == b'{"id":"a","x":1}'

    @pytest.mark.asyncio
    async def test_unbounded_by_default(self, recording_sink):
        service = IngestService(recording_sink)
        chunks = [b"x" * 65536 for _ in range(64)]
        body = await service.read_body(stream_of(*chunks))
        assert len(body) == 64 * 65536

    @pytest.mark.asyncio
    async def test_body_at_limit_is_accepted(self, recording_sink):
        service = IngestService(recording_sink, max_body_size=10)
        body = await service.read_body(stream_of(b"12345", b"67890"))
        assert body == b"1234567890"

    @pytest.mark.asyncio
    async def test_body_over_limit_is_rejected(self, recording_sink):
        service = IngestService(recording_sink, max_body_size=10)
        with pytest.raises(PayloadTooLargeError) as exc_info:
            await service.read_body(stream_of(b"12345", b"678901"))
        assert exc_info.value.status_code == 413
        assert exc_info.value.context["received"] == 11

    @pytest.mark.asyncio
    async def test_stalled_body_times_out(self, recording_sink):
        async def stalled():
            yield b"{"
            await asyncio.sleep(5)
            yield b"}"

        service = IngestService(recording_sink, body_timeout=0.05)
        with pytest.raises(BodyTimeoutError) as exc_info:
            await service.read_body(stalled())
        assert exc_info.value.status_code == 408


class TestParse:
    """Tests for JSON decoding and shape validation."""

    def setup_method(self):
        self.service = IngestService(sink=None)

    def test_valid_payload(self):
        payload = self.service.parse(b'{"id":"abc","x":1,"y":2,"r":3}')
        assert payload.to_mapping() == {"abc": {"x": 1, "y": 2, "r": 3}}

    def test_values_pass_through_unchanged(self):
        payload = self.service.parse(
            b'{"id":"m","x":"left","y":null,"r":[1,2],"extra":true}'
        )
        assert payload.to_mapping() == {"m": {"x": "left", "y": None, "r": [1, 2]}}

    def test_numeric_id_becomes_string_key(self):
        payload = self.service.parse(b'{"id":7,"x":0.5,"y":-2,"r":1e3}')
        assert payload.to_mapping() == {"7": {"x": 0.5, "y": -2, "r": 1000.0}}

    def test_integral_float_id_key(self):
        assert self.service.parse(b'{"id":7.0,"x":0,"y":0,"r":0}').key == "7"

    def test_boolean_and_null_ids(self):
        assert self.service.parse(b'{"id":true,"x":0,"y":0,"r":0}').key == "true"
        assert self.service.parse(b'{"id":null,"x":0,"y":0,"r":0}').key == "null"

    def test_malformed_json(self):
        with pytest.raises(InvalidBodyError, match="Invalid JSON body") as exc_info:
            self.service.parse(b"{not json")
        assert exc_info.value.status_code == 500

    def test_empty_body(self):
        with pytest.raises(InvalidBodyError):
            self.service.parse(b"")

    def test_non_utf8_body(self):
        with pytest.raises(InvalidBodyError):
            self.service.parse(b"\xff\xfe{}")

    def test_nan_is_rejected(self):
        with pytest.raises(InvalidBodyError, match="NaN"):
            self.service.parse(b'{"id":"a","x":NaN,"y":0,"r":0}')

    def test_overflowing_number_is_rejected(self):
        with pytest.raises(InvalidBodyError, match="1e400 is out of range"):
            self.service.parse(b'{"id":"a","x":1e400,"y":2,"r":3}')
        with pytest.raises(InvalidBodyError, match="out of range"):
            self.service.parse(b'{"id":"a","x":0,"y":-1e999,"r":3}')

    def test_non_object_is_rejected(self):
        with pytest.raises(InvalidBodyError, match="expected a JSON object"):
            self.service.parse(b"[1, 2, 3]")

    def test_missing_field_is_rejected(self):
        with pytest.raises(InvalidBodyError, match="r: Field required"):
            self.service.parse(b'{"id":"a","x":1,"y":2}')

    def test_object_id_is_rejected(self):
        with pytest.raises(InvalidBodyError, match="id"):
            self.service.parse(b'{"id":{"k":1},"x":1,"y":2,"r":3}')

    def test_configured_status(self):
        service = IngestService(sink=None, invalid_body_status=400)
        with pytest.raises(InvalidBodyError) as exc_info:
            service.parse(b"{not json")
        assert exc_info.value.status_code == 400


class TestIngest:
    """Tests for parse → map → deliver."""

    @pytest.mark.asyncio
    async def test_delivers_mapping(self, recording_sink):
        service = IngestService(recording_sink)
        mapping = await service.ingest(b'{"id":"abc","x":1,"y":2,"r":3}')
        assert mapping == {"abc": {"x": 1, "y": 2, "r": 3}}
        assert recording_sink.delivered == [{"abc": {"x": 1, "y": 2, "r": 3}}]

    @pytest.mark.asyncio
    async def test_invalid_body_is_not_delivered(self, recording_sink):
        service = IngestService(recording_sink)
        with pytest.raises(InvalidBodyError):
            await service.ingest(b"{not json")
        assert recording_sink.delivered == []

    @pytest.mark.asyncio
    async def test_repeated_bodies_are_not_deduplicated(self, recording_sink):
        service = IngestService(recording_sink)
        body = b'{"id":"abc","x":1,"y":2,"r":3}'
        await service.ingest(body)
        await service.ingest(body)
        assert recording_sink.delivered == [
            {"abc": {"x": 1, "y": 2, "r": 3}},
            {"abc": {"x": 1, "y": 2, "r": 3}},
        ]
        assert recording_sink.delivered[0] is not recording_sink.delivered[1]

    @pytest.mark.asyncio
    async def test_sink_failure_propagates(self):
        service = IngestService(FailingSink())
        with pytest.raises(SinkDeliveryError, match="host unavailable"):
            await service.ingest(b'{"id":"abc","x":1,"y":2,"r":3}')
