"""Flow models: ordered request steps and their execution results."""

import uuid
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

from chainpost.models.response import RequestResponse


class FlowStep(BaseModel):
    """
    A single step in a flow.

    The request is referenced by id only; deleting the request leaves the step
    in place and its execution then fails with "not found".
    """
    id: UUID = Field(default_factory=uuid.uuid4)
    order: int = 0
    request_id: UUID
    flow_id: UUID | None = None
    is_enabled: bool = True
    continue_on_error: bool = False
    delay_before_execution_ms: int | None = None


class Flow(BaseModel):
    """Sequence of requests executed one after another, sharing variables."""
    id: UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    description: str | None = None
    collection_id: UUID | None = None  # Scopes collection variables; environment is chosen at run time
    steps: list[FlowStep] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class FlowExecutionStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class FlowStepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED_CONTINUED = "failed_continued"  # Failed, flow continued (continue_on_error)
    FAILED = "failed"
    SKIPPED = "skipped"  # Step disabled


def _duration_ms(started_at: datetime, completed_at: datetime | None) -> int:
    if completed_at is None:
        return 0
    return int((completed_at - started_at).total_seconds() * 1000)


class FlowStepResult(BaseModel):
    """Result of executing a single flow step."""
    step_id: UUID
    step_order: int
    request_name: str = ""
    request_id: UUID | None = None
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: datetime | None = None
    status: FlowStepStatus = FlowStepStatus.RUNNING
    response: RequestResponse | None = None
    error_message: str | None = None

    @computed_field
    @property
    def duration_ms(self) -> int:
        return _duration_ms(self.started_at, self.completed_at)


class FlowExecutionResult(BaseModel):
    """Result of one flow execution. Built per call, never persisted here."""
    flow_id: UUID
    flow_name: str = ""
    environment_id: UUID | None = None
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: datetime | None = None
    status: FlowExecutionStatus = FlowExecutionStatus.RUNNING
    step_results: list[FlowStepResult] = Field(default_factory=list)
    error_message: str | None = None

    @computed_field
    @property
    def total_duration_ms(self) -> int:
        return _duration_ms(self.started_at, self.completed_at)

    @property
    def summary(self) -> dict:
        return {
            "total": len(self.step_results),
            "succeeded": sum(1 for r in self.step_results if r.status == FlowStepStatus.SUCCESS),
            "failed": sum(
                1 for r in self.step_results
                if r.status in (FlowStepStatus.FAILED, FlowStepStatus.FAILED_CONTINUED)
            ),
            "skipped": sum(1 for r in self.step_results if r.status == FlowStepStatus.SKIPPED),
            "duration_ms": self.total_duration_ms,
        }
