"""Pydantic schemas for flows."""

from uuid import UUID
from pydantic import BaseModel, Field


class FlowStepCreate(BaseModel):
    """Schema for a flow step; ids are assigned by the server."""
    order: int = Field(0, ge=0)
    request_id: UUID
    is_enabled: bool = True
    continue_on_error: bool = False
    delay_before_execution_ms: int | None = Field(None, ge=0, le=300000)


class FlowCreate(BaseModel):
    """Schema for creating a flow."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    collection_id: UUID | None = None
    steps: list[FlowStepCreate] = Field(default_factory=list)


class FlowUpdate(BaseModel):
    """Schema for updating a flow. Steps, when given, replace the existing ones."""
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    collection_id: UUID | None = None
    steps: list[FlowStepCreate] | None = None


class FlowSummary(BaseModel):
    """Summary schema for listing flows."""
    id: UUID
    name: str
    description: str | None = None
    collection_id: UUID | None = None
    step_count: int = 0


class ExecuteFlowRequest(BaseModel):
    """Body for running a flow."""
    environment_id: UUID
