from markerbridge.schemas.marker import MarkerId, MarkerPayload

__all__ = ["MarkerId", "MarkerPayload"]
