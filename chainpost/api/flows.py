"""Flow CRUD and execution routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from chainpost.dependencies import get_flow_service, get_request_service
from chainpost.models.flow import Flow, FlowExecutionResult, FlowStep
from chainpost.schemas.flow import ExecuteFlowRequest, FlowCreate, FlowStepCreate, FlowSummary, FlowUpdate
from chainpost.services.flow_service import FlowService
from chainpost.services.request_service import RequestService

router = APIRouter()


async def _build_steps(steps: list[FlowStepCreate], request_service: RequestService) -> list[FlowStep]:
    for step in steps:
        if not await request_service.get_request(step.request_id):
            raise HTTPException(status_code=404, detail=f"Request {step.request_id} not found")
    return [FlowStep(**step.model_dump()) for step in steps]


@router.get("", response_model=list[FlowSummary])
async def list_flows(
    collection_id: UUID | None = None,
    flow_service: FlowService = Depends(get_flow_service),
):
    """List flows, optionally filtered by collection."""
    if collection_id:
        flows = await flow_service.get_flows_by_collection(collection_id)
    else:
        flows = await flow_service.get_all_flows()

    return [
        FlowSummary(
            id=flow.id,
            name=flow.name,
            description=flow.description,
            collection_id=flow.collection_id,
            step_count=len(flow.steps),
        )
        for flow in sorted(flows, key=lambda f: f.created_at)
    ]


@router.post("", response_model=Flow)
async def create_flow(
    data: FlowCreate,
    flow_service: FlowService = Depends(get_flow_service),
    request_service: RequestService = Depends(get_request_service),
):
    """Create a flow. Step requests must exist at creation time."""
    flow = Flow(
        name=data.name,
        description=data.description,
        collection_id=data.collection_id,
        steps=await _build_steps(data.steps, request_service),
    )
    return await flow_service.create_flow(flow)


@router.get("/{flow_id}", response_model=Flow)
async def get_flow(
    flow_id: UUID,
    flow_service: FlowService = Depends(get_flow_service),
):
    """Get a flow with its steps."""
    flow = await flow_service.get_flow(flow_id)
    if not flow:
        raise HTTPException(status_code=404, detail="Flow not found")
    return flow


@router.patch("/{flow_id}", response_model=Flow)
async def update_flow(
    flow_id: UUID,
    data: FlowUpdate,
    flow_service: FlowService = Depends(get_flow_service),
    request_service: RequestService = Depends(get_request_service),
):
    """Update a flow."""
    flow = await flow_service.get_flow(flow_id)
    if not flow:
        raise HTTPException(status_code=404, detail="Flow not found")

    if data.name is not None:
        flow.name = data.name
    if "description" in data.model_fields_set:
        flow.description = data.description
    if "collection_id" in data.model_fields_set:
        flow.collection_id = data.collection_id
    if data.steps is not None:
        flow.steps = await _build_steps(data.steps, request_service)

    return await flow_service.update_flow(flow)


@router.delete("/{flow_id}")
async def delete_flow(
    flow_id: UUID,
    flow_service: FlowService = Depends(get_flow_service),
):
    """Delete a flow."""
    if not await flow_service.get_flow(flow_id):
        raise HTTPException(status_code=404, detail="Flow not found")
    await flow_service.delete_flow(flow_id)
    return {"status": "deleted"}


@router.post("/{flow_id}/execute", response_model=FlowExecutionResult)
async def execute_flow(
    flow_id: UUID,
    data: ExecuteFlowRequest,
    flow_service: FlowService = Depends(get_flow_service),
):
    """
    Run a flow's steps in order against an environment.

    Step failures are reported in the result; the stored environment and
    collection are left unchanged.
    """
    return await flow_service.execute_flow(flow_id, data.environment_id)
