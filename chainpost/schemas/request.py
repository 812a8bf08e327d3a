"""Pydantic schemas for requests."""

from uuid import UUID
from pydantic import BaseModel


class RequestSummary(BaseModel):
    """Summary schema for listing requests."""
    id: UUID
    name: str
    type: str
    url: str
    collection_id: UUID | None = None
    order_index: int = 0


class MoveRequest(BaseModel):
    """Move a request one place among its collection siblings."""
    move_up: bool = True
