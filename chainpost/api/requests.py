"""Request CRUD and execution routes."""

from typing import Annotated, Union
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException

from chainpost.dependencies import get_collection_service, get_environment_service, get_request_service
from chainpost.models.request import GraphQLRequest, RestRequest, WebSocketRequest
from chainpost.models.response import RequestResponse
from chainpost.schemas.request import MoveRequest, RequestSummary
from chainpost.services.collection_service import CollectionService
from chainpost.services.environment_service import EnvironmentService
from chainpost.services.request_service import RequestService

router = APIRouter()

AnyRequest = Union[RestRequest, GraphQLRequest, WebSocketRequest]
RequestBody = Annotated[AnyRequest, Body(discriminator="type")]


@router.get("", response_model=list[RequestSummary])
async def list_requests(
    collection_id: UUID | None = None,
    request_service: RequestService = Depends(get_request_service),
):
    """List requests, optionally filtered by collection."""
    if collection_id:
        requests = await request_service.get_requests_by_collection(collection_id)
    else:
        requests = await request_service.get_all_requests()
    return [RequestSummary(**r.model_dump(include=set(RequestSummary.model_fields))) for r in requests]


@router.post("", response_model=AnyRequest)
async def create_request(
    data: RequestBody,
    request_service: RequestService = Depends(get_request_service),
    collection_service: CollectionService = Depends(get_collection_service),
):
    """Create a REST, GraphQL or WebSocket request; the body's type field selects the variant."""
    if data.collection_id and not await collection_service.get(data.collection_id):
        raise HTTPException(status_code=404, detail="Collection not found")
    return await request_service.create_request(data)


@router.get("/{request_id}", response_model=AnyRequest)
async def get_request(
    request_id: UUID,
    request_service: RequestService = Depends(get_request_service),
):
    """Get a request."""
    request = await request_service.get_request(request_id)
    if not request:
        raise HTTPException(status_code=404, detail="Request not found")
    return request


@router.put("/{request_id}", response_model=AnyRequest)
async def update_request(
    request_id: UUID,
    data: RequestBody,
    request_service: RequestService = Depends(get_request_service),
):
    """Replace a request. The variant may change; id and creation time are kept."""
    existing = await request_service.get_request(request_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Request not found")

    request = data.model_copy(update={"id": request_id, "created_at": existing.created_at})
    return await request_service.update_request(request)


@router.delete("/{request_id}")
async def delete_request(
    request_id: UUID,
    request_service: RequestService = Depends(get_request_service),
):
    """Delete a request. Flow steps referencing it fail when run."""
    if not await request_service.get_request(request_id):
        raise HTTPException(status_code=404, detail="Request not found")
    await request_service.delete_request(request_id)
    return {"status": "deleted"}


@router.post("/{request_id}/move")
async def move_request(
    request_id: UUID,
    data: MoveRequest,
    request_service: RequestService = Depends(get_request_service),
):
    """Move a request one place up or down within its collection."""
    await request_service.move_request(request_id, data.move_up)
    return {"status": "moved"}


@router.post("/{request_id}/execute", response_model=RequestResponse)
async def execute_request(
    request_id: UUID,
    environment_id: UUID | None = None,
    request_service: RequestService = Depends(get_request_service),
    environment_service: EnvironmentService = Depends(get_environment_service),
):
    """
    Execute a stored request.

    Uses the given environment, or the active one when omitted. Values
    extracted from the response are saved to the environment or collection.
    """
    request = await request_service.get_request_or_raise(request_id)
    environment = None
    if environment_id:
        environment = await environment_service.get_or_raise(environment_id)
    return await request_service.execute_request(request, environment)
