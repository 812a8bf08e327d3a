"""Tracks which environment single-request execution uses by default."""

from uuid import UUID

from chainpost.models.environment import Environment
from chainpost.services.environment_service import EnvironmentService


class ActiveEnvironmentService:
    def __init__(self, environment_service: EnvironmentService):
        self.environment_service = environment_service
        self._active_environment_id: UUID | None = None

    async def get_active_environment_id(self) -> UUID | None:
        return self._active_environment_id

    async def set_active_environment_id(self, environment_id: UUID | None) -> None:
        self._active_environment_id = environment_id

    async def get_active_environment(self) -> Environment | None:
        """The active environment with secrets merged, or None if unset or deleted."""
        if self._active_environment_id is None:
            return None
        return await self.environment_service.get(self._active_environment_id)
