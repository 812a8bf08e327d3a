"""Environment CRUD and activation routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from chainpost.dependencies import get_active_environment_service, get_environment_service
from chainpost.models.environment import Environment
from chainpost.schemas.environment import EnvironmentCreate, EnvironmentSummary, EnvironmentUpdate
from chainpost.services.active_environment_service import ActiveEnvironmentService
from chainpost.services.environment_service import EnvironmentService

router = APIRouter()


@router.get("", response_model=list[EnvironmentSummary])
async def list_environments(
    environment_service: EnvironmentService = Depends(get_environment_service),
    active_environment_service: ActiveEnvironmentService = Depends(get_active_environment_service),
):
    """List environments, sorted by name."""
    active_id = await active_environment_service.get_active_environment_id()
    environments = sorted(await environment_service.get_all(), key=lambda e: e.name.lower())
    return [
        EnvironmentSummary(
            id=env.id,
            name=env.name,
            description=env.description,
            is_active=env.id == active_id,
            variable_count=len(env.variables) + len(env.secret_variable_names),
        )
        for env in environments
    ]


@router.post("", response_model=Environment)
async def create_environment(
    data: EnvironmentCreate,
    environment_service: EnvironmentService = Depends(get_environment_service),
):
    """Create a new environment."""
    return await environment_service.create(Environment(**data.model_dump()))


@router.get("/active", response_model=Environment | None)
async def get_active_environment(
    active_environment_service: ActiveEnvironmentService = Depends(get_active_environment_service),
):
    """Get the environment used when a request is executed without one."""
    return await active_environment_service.get_active_environment()


@router.get("/{environment_id}", response_model=Environment)
async def get_environment(
    environment_id: UUID,
    environment_service: EnvironmentService = Depends(get_environment_service),
):
    """Get an environment with its secret variables merged in."""
    environment = await environment_service.get(environment_id)
    if not environment:
        raise HTTPException(status_code=404, detail="Environment not found")
    return environment


@router.patch("/{environment_id}", response_model=Environment)
async def update_environment(
    environment_id: UUID,
    data: EnvironmentUpdate,
    environment_service: EnvironmentService = Depends(get_environment_service),
):
    """Update an environment."""
    environment = await environment_service.get(environment_id)
    if not environment:
        raise HTTPException(status_code=404, detail="Environment not found")

    updated = Environment.model_validate({**environment.model_dump(), **data.model_dump(exclude_unset=True)})
    return await environment_service.update(updated)


@router.delete("/{environment_id}")
async def delete_environment(
    environment_id: UUID,
    environment_service: EnvironmentService = Depends(get_environment_service),
    active_environment_service: ActiveEnvironmentService = Depends(get_active_environment_service),
):
    """Delete an environment and its secret variables."""
    environment = await environment_service.get(environment_id)
    if not environment:
        raise HTTPException(status_code=404, detail="Environment not found")

    if await active_environment_service.get_active_environment_id() == environment_id:
        await active_environment_service.set_active_environment_id(None)
    await environment_service.delete(environment_id)
    return {"status": "deleted"}


@router.post("/{environment_id}/activate", response_model=Environment)
async def activate_environment(
    environment_id: UUID,
    environment_service: EnvironmentService = Depends(get_environment_service),
    active_environment_service: ActiveEnvironmentService = Depends(get_active_environment_service),
):
    """Make an environment the active one."""
    environment = await environment_service.get(environment_id)
    if not environment:
        raise HTTPException(status_code=404, detail="Environment not found")

    await active_environment_service.set_active_environment_id(environment_id)
    return environment
