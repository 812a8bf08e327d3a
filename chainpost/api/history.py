"""Request history routes."""

from fastapi import APIRouter, Depends, Query

from chainpost.dependencies import get_history_service
from chainpost.models.history import RequestHistoryEntry
from chainpost.services.history_service import RequestHistoryService

router = APIRouter()


@router.get("", response_model=list[RequestHistoryEntry])
async def list_history(
    limit: int | None = Query(None, ge=1),
    history_service: RequestHistoryService = Depends(get_history_service),
):
    """List executed requests, newest first."""
    return await history_service.get_history(limit)


@router.delete("")
async def clear_history(
    history_service: RequestHistoryService = Depends(get_history_service),
):
    """Remove every history entry."""
    await history_service.clear()
    return {"status": "cleared"}
