"""Collection CRUD routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from chainpost.dependencies import get_collection_service, get_flow_service, get_request_service
from chainpost.models.collection import Collection
from chainpost.schemas.collection import CollectionCreate, CollectionSummary, CollectionUpdate
from chainpost.schemas.flow import FlowSummary
from chainpost.schemas.request import RequestSummary
from chainpost.services.collection_service import CollectionService
from chainpost.services.flow_service import FlowService
from chainpost.services.request_service import RequestService

router = APIRouter()


def _summary(collection: Collection) -> CollectionSummary:
    return CollectionSummary(
        id=collection.id,
        name=collection.name,
        description=collection.description,
        parent_collection_id=collection.parent_collection_id,
        variable_count=len(collection.variables) + len(collection.secret_variable_names),
    )


@router.get("", response_model=list[CollectionSummary])
async def list_collections(
    collection_service: CollectionService = Depends(get_collection_service),
):
    """List top-level collections."""
    return [_summary(c) for c in await collection_service.get_children(None)]


@router.post("", response_model=Collection)
async def create_collection(
    data: CollectionCreate,
    collection_service: CollectionService = Depends(get_collection_service),
):
    """Create a new collection, optionally nested under a parent."""
    if data.parent_collection_id and not await collection_service.get(data.parent_collection_id):
        raise HTTPException(status_code=404, detail="Parent collection not found")
    return await collection_service.create(Collection(**data.model_dump()))


@router.get("/{collection_id}", response_model=Collection)
async def get_collection(
    collection_id: UUID,
    collection_service: CollectionService = Depends(get_collection_service),
):
    """Get a collection with its secret variables merged in."""
    collection = await collection_service.get(collection_id)
    if not collection:
        raise HTTPException(status_code=404, detail="Collection not found")
    return collection


@router.get("/{collection_id}/children", response_model=list[CollectionSummary])
async def list_children(
    collection_id: UUID,
    collection_service: CollectionService = Depends(get_collection_service),
):
    """List the direct child collections."""
    if not await collection_service.get(collection_id):
        raise HTTPException(status_code=404, detail="Collection not found")
    return [_summary(c) for c in await collection_service.get_children(collection_id)]


@router.get("/{collection_id}/requests", response_model=list[RequestSummary])
async def list_collection_requests(
    collection_id: UUID,
    request_service: RequestService = Depends(get_request_service),
):
    """List the requests of a collection in display order."""
    requests = await request_service.get_requests_by_collection(collection_id)
    return [RequestSummary(**r.model_dump(include=set(RequestSummary.model_fields))) for r in requests]


@router.get("/{collection_id}/flows", response_model=list[FlowSummary])
async def list_collection_flows(
    collection_id: UUID,
    flow_service: FlowService = Depends(get_flow_service),
):
    """List the flows scoped to a collection."""
    return [
        FlowSummary(
            id=f.id,
            name=f.name,
            description=f.description,
            collection_id=f.collection_id,
            step_count=len(f.steps),
        )
        for f in await flow_service.get_flows_by_collection(collection_id)
    ]


@router.patch("/{collection_id}", response_model=Collection)
async def update_collection(
    collection_id: UUID,
    data: CollectionUpdate,
    collection_service: CollectionService = Depends(get_collection_service),
):
    """Update a collection."""
    collection = await collection_service.get(collection_id)
    if not collection:
        raise HTTPException(status_code=404, detail="Collection not found")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("parent_collection_id") == collection_id:
        raise HTTPException(status_code=400, detail="A collection cannot be its own parent")

    return await collection_service.update(Collection.model_validate({**collection.model_dump(), **changes}))


@router.delete("/{collection_id}")
async def delete_collection(
    collection_id: UUID,
    collection_service: CollectionService = Depends(get_collection_service),
):
    """Delete a collection and its secret variables."""
    if not await collection_service.get(collection_id):
        raise HTTPException(status_code=404, detail="Collection not found")
    await collection_service.delete(collection_id)
    return {"status": "deleted"}
