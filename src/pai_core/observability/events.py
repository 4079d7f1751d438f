"""Event layer: the JSON document posted to the observability server."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field


EventType = Literal[
    "session.start",
    "session.end",
    "tool.execute",
    "tool.blocked",
    "security.block",
    "security.warn",
    "message.user",
    "message.assistant",
    "rating.explicit",
    "rating.implicit",
    "agent.spawn",
    "agent.complete",
    "voice.sent",
    "learning.captured",
    "isc.validated",
    "context.loaded",
]

EVENT_TYPES: tuple[str, ...] = get_args(EventType)


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a `Z` suffix."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


class ObservabilityEvent(BaseModel):
    """Single lifecycle event. Built per emission and never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = Field(default_factory=utc_now_iso)
    session_id: str
    event_type: EventType
    data: dict[str, Any] = Field(default_factory=dict)

    def to_json(self) -> str:
        # Values the JSON encoder cannot handle are coerced to strings, not rejected.
        body = {
            "id": self.id,
            "timestamp": self.timestamp,
            "session_id": self.session_id,
            "event_type": self.event_type,
            "data": self.data,
        }
        return json.dumps(body, default=str)
