"""Captured response of a request execution."""

from datetime import datetime
from pydantic import BaseModel, Field


class StreamEvent(BaseModel):
    """Single event received on a streaming (WebSocket/SSE) connection."""
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    data: str = ""
    event_type: str | None = None


class SentRequest(BaseModel):
    """The request exactly as it was transmitted, after variable resolution."""
    url: str = ""
    method: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None
    query_parameters: dict[str, str] = Field(default_factory=dict)


class RequestResponse(BaseModel):
    """Response with timing, size and the sent request for history."""
    status_code: int = 0
    status_message: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: str = ""
    response_time_ms: int = 0
    size: int = 0
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    sent_request: SentRequest | None = None
    is_streaming: bool = False
    stream_events: list[StreamEvent] = Field(default_factory=list)

    def header(self, name: str) -> str | None:
        """Get header value (case-insensitive)."""
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return value
        return None

    def add_stream_event(self, data: str, event_type: str | None = None) -> None:
        self.stream_events.append(StreamEvent(data=data, event_type=event_type))
