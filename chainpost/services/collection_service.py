"""Collection management."""

from uuid import UUID

from chainpost.models.collection import Collection
from chainpost.services.crud_base import SecretAwareCrudService
from chainpost.services.secret_variables_service import COLLECTION_SCOPE


class CollectionService(SecretAwareCrudService[Collection]):
    scope = COLLECTION_SCOPE
    entity_name = "Collection"

    async def get_children(self, parent_collection_id: UUID | None) -> list[Collection]:
        """Direct children of a collection; None lists the root collections."""
        collections = await self.get_all()
        children = [c for c in collections if c.parent_collection_id == parent_collection_id]
        return sorted(children, key=lambda c: (c.name.lower(), c.created_at))
