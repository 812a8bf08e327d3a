"""Secret variable store, kept apart from the entity repositories."""

from abc import ABC, abstractmethod
from typing import Literal
from uuid import UUID

SecretScope = Literal["environment", "collection"]


class SecretVariablesRepository(ABC):
    """Stores secret variable values keyed by (scope, entity id)."""

    @abstractmethod
    async def get_secrets(self, scope: SecretScope, entity_id: UUID) -> dict[str, str]:
        ...

    @abstractmethod
    async def save_secrets(self, scope: SecretScope, entity_id: UUID, secrets: dict[str, str]) -> None:
        ...

    @abstractmethod
    async def delete_secrets(self, scope: SecretScope, entity_id: UUID) -> None:
        ...


class InMemorySecretVariablesRepository(SecretVariablesRepository):
    def __init__(self):
        self._secrets: dict[tuple[str, UUID], dict[str, str]] = {}

    async def get_secrets(self, scope: SecretScope, entity_id: UUID) -> dict[str, str]:
        return dict(self._secrets.get((scope, entity_id), {}))

    async def save_secrets(self, scope: SecretScope, entity_id: UUID, secrets: dict[str, str]) -> None:
        self._secrets[(scope, entity_id)] = dict(secrets)

    async def delete_secrets(self, scope: SecretScope, entity_id: UUID) -> None:
        self._secrets.pop((scope, entity_id), None)
