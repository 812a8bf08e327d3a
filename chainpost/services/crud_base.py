"""Shared CRUD for entities whose variables may hold secrets."""

import logging
from datetime import datetime
from typing import ClassVar, Generic, TypeVar
from uuid import UUID

from chainpost.db.repository import Repository
from chainpost.db.secrets import SecretScope
from chainpost.exceptions import EntityNotFoundError
from chainpost.models.collection import Collection
from chainpost.models.environment import Environment
from chainpost.services.execution.secret_variables import merge_secret_variables, separate_variables
from chainpost.services.secret_variables_service import SecretVariablesService

logger = logging.getLogger(__name__)

V = TypeVar("V", Environment, Collection)


class SecretAwareCrudService(Generic[V]):
    """
    CRUD over a variable-holding entity.

    Variables named in secret_variable_names are written to the secret store
    and stripped from the entity before it reaches the repository. Reads
    merge them back, so callers always see the full variable map.
    """

    scope: ClassVar[SecretScope]
    entity_name: ClassVar[str]

    def __init__(self, repository: Repository[V], secret_variables: SecretVariablesService):
        self.repository = repository
        self.secret_variables = secret_variables

    async def create(self, entity: V) -> V:
        entity.created_at = datetime.utcnow()
        entity.updated_at = entity.created_at
        return await self._save(entity, new=True)

    async def get_all(self) -> list[V]:
        """All entities with plain variables only; secrets are merged on single reads."""
        return await self.repository.get_all()

    async def get(self, entity_id: UUID) -> V | None:
        entity = await self.repository.get_by_id(entity_id)
        if entity is None:
            return None
        secrets = await self.secret_variables.get_secrets(self.scope, entity_id)
        merge_secret_variables(entity.variables, secrets)
        return entity

    async def get_or_raise(self, entity_id: UUID) -> V:
        """
        Raises:
            EntityNotFoundError: If no entity has the id
        """
        entity = await self.get(entity_id)
        if entity is None:
            raise EntityNotFoundError(self.entity_name, entity_id)
        return entity

    async def update(self, entity: V) -> V:
        entity.updated_at = datetime.utcnow()
        return await self._save(entity, new=False)

    async def delete(self, entity_id: UUID) -> None:
        await self.secret_variables.delete_secrets(self.scope, entity_id)
        await self.repository.delete(entity_id)

    async def _save(self, entity: V, new: bool) -> V:
        separated = separate_variables(entity.variables, entity.secret_variable_names)
        await self.secret_variables.save_secrets(self.scope, entity.id, separated.secret_variables)

        stored = entity.model_copy(deep=True)
        stored.variables = separated.plain_variables
        if new:
            await self.repository.add(stored)
        else:
            await self.repository.update(stored)

        logger.debug(
            "Saved %s %s (%d plain, %d secret variables)",
            self.entity_name, entity.id,
            len(separated.plain_variables), len(separated.secret_variables),
        )

        result = stored.model_copy(deep=True)
        merge_secret_variables(result.variables, separated.secret_variables)
        return result
