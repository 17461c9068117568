"""
Realtime event envelope model.
"""

from typing import Any, Dict
from pydantic import BaseModel, Field, ConfigDict

from .flight import utc_timestamp


class EventEnvelopeModel(BaseModel):
    """Event published to a flight room."""
    model_config = ConfigDict(frozen=True)

    room: str = Field(..., description="Flight key the event is scoped to")
    event: str = Field(..., description="Event name (e.g. 'pax:updated')")
    payload: Dict[str, Any] = Field(default_factory=dict)
    sequence: int = Field(..., ge=1, description="Hub-wide publish order")
    published_at: str = Field(default_factory=utc_timestamp)

    def to_message(self) -> Dict[str, Any]:
        """Message shape sent to websocket clients."""
        return {"event": self.event, "room": self.room, "payload": self.payload}
