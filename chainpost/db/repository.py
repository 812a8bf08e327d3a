"""Persistence collaborators: generic repository contract and in-memory store."""

import asyncio
from abc import ABC, abstractmethod
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class Repository(ABC, Generic[T]):
    """Async CRUD contract consumed by the services."""

    @abstractmethod
    async def get_by_id(self, entity_id: UUID) -> T | None:
        ...

    @abstractmethod
    async def get_all(self) -> list[T]:
        ...

    @abstractmethod
    async def add(self, entity: T) -> T:
        ...

    @abstractmethod
    async def update(self, entity: T) -> T:
        ...

    @abstractmethod
    async def delete(self, entity_id: UUID) -> None:
        ...


class InMemoryRepository(Repository[T]):
    """
    Repository backed by a dict keyed by entity id.

    Entities are deep-copied on the way in and out, so the stored state only
    changes through add/update, the same way a real store behaves.
    """

    def __init__(self):
        self._data: dict[UUID, T] = {}
        self._lock = asyncio.Lock()

    async def get_by_id(self, entity_id: UUID) -> T | None:
        entity = self._data.get(entity_id)
        return entity.model_copy(deep=True) if entity is not None else None

    async def get_all(self) -> list[T]:
        return [entity.model_copy(deep=True) for entity in self._data.values()]

    async def add(self, entity: T) -> T:
        async with self._lock:
            self._data[entity.id] = entity.model_copy(deep=True)
        return entity

    async def update(self, entity: T) -> T:
        async with self._lock:
            self._data[entity.id] = entity.model_copy(deep=True)
        return entity.model_copy(deep=True)

    async def delete(self, entity_id: UUID) -> None:
        async with self._lock:
            self._data.pop(entity_id, None)
