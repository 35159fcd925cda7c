"""
markerbridge: Marker Payload Schema
======================================

What:  The shape of a POST /qr/* body and the mapping built from it.
How:   The body is decoded with json.loads first (so parse errors keep their
       own message), then validated with MarkerPayload.

Accepted body:
    {"id": "abc", "x": 1, "y": 2, "r": 3}

Forwarded mapping:
    {"abc": {"x": 1, "y": 2, "r": 3}}

x, y and r are typed Any: whatever JSON value arrived is forwarded as-is,
with no coercion or range checking.
"""

import json
from typing import Any, Dict, Union

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr

MarkerId = Union[StrictStr, StrictBool, StrictInt, StrictFloat, None]


class MarkerPayload(BaseModel):
    """
    What:  One marker observation sent by the tracker page.
    Why strict id types: the id becomes a mapping key, so objects and
           arrays are rejected instead of being stringified.
    """

    id: MarkerId = Field(..., description="Marker identifier, used as the mapping key")
    x: Any = Field(..., description="Horizontal position")
    y: Any = Field(..., description="Vertical position")
    r: Any = Field(..., description="Radius or rotation")

    model_config = {"extra": "ignore"}

    @property
    def key(self) -> str:
        """The id as it reads when used as a JSON object key."""
        if isinstance(self.id, str):
            return self.id
        if isinstance(self.id, float) and self.id.is_integer():
            return str(int(self.id))
        return json.dumps(self.id)

    def to_mapping(self) -> Dict[str, Dict[str, Any]]:
        """Build the single-entry mapping handed to the sink."""
        return {self.key: {"x": self.x, "y": self.y, "r": self.r}}
