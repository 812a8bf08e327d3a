"""Request history entry model."""

import uuid
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from chainpost.models.response import RequestResponse, SentRequest


class RequestHistoryEntry(BaseModel):
    """A past execution: what was sent and what came back."""
    id: UUID = Field(default_factory=uuid.uuid4)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    request_name: str = ""
    request_type: str = ""
    sent_request: SentRequest = Field(default_factory=SentRequest)
    response: RequestResponse = Field(default_factory=RequestResponse)

    # Links back to the originating entities
    request_id: UUID | None = None
    environment_id: UUID | None = None  # Environment used during execution
    collection_id: UUID | None = None
