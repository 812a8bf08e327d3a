"""Access to secret variable values stored outside the entity repositories."""

from uuid import UUID

from chainpost.db.secrets import SecretScope, SecretVariablesRepository

ENVIRONMENT_SCOPE: SecretScope = "environment"
COLLECTION_SCOPE: SecretScope = "collection"


class SecretVariablesService:
    """Reads and writes secret values for environments and collections."""

    def __init__(self, repository: SecretVariablesRepository):
        self.repository = repository

    async def get_secrets(self, scope: SecretScope, entity_id: UUID) -> dict[str, str]:
        return await self.repository.get_secrets(scope, entity_id)

    async def save_secrets(self, scope: SecretScope, entity_id: UUID, secrets: dict[str, str]) -> None:
        await self.repository.save_secrets(scope, entity_id, secrets)

    async def delete_secrets(self, scope: SecretScope, entity_id: UUID) -> None:
        await self.repository.delete_secrets(scope, entity_id)
