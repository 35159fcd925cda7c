"""
markerbridge: Abstract Sink Interface
========================================

What:  The contract for delivering a marker mapping to the host process.
How:   Concrete sinks inherit from EmitSink and implement deliver().
Who:   Called by IngestService once per accepted POST /qr/* body.

Implementations (services/sinks.py):
    - StdoutSink:  one JSON line per mapping on a text stream
    - LoggingSink: one log record per mapping
    - WebhookSink: one HTTP POST per mapping
Tests supply their own recording sink.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

MarkerMapping = Dict[str, Dict[str, Any]]


class EmitSink(ABC):
    """
    One-way delivery of marker mappings.

    Contract:
        - deliver() is called with a fresh single-entry mapping per request
        - No acknowledgement is expected beyond returning normally
        - Failures are raised as SinkDeliveryError; nothing is retried
        - Repeated identical mappings are delivered every time (no dedup)
    """

    @abstractmethod
    async def deliver(self, mapping: MarkerMapping) -> None:
        """
        Hand a mapping to the host.

        Args:
            mapping: {marker_id: {"x": ..., "y": ..., "r": ...}}

        Raises:
            SinkDeliveryError: When the host could not be reached.
        """
        ...

    async def close(self) -> None:
        """Release any resources held by the sink. Called on app shutdown."""
        return None
