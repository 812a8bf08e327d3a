"""Collection model: a tree of requests sharing variables."""

import uuid
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from chainpost.models.dynamic_variable import DynamicVariable


class Collection(BaseModel):
    """Group of requests with collection-level variables."""
    id: UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    description: str | None = None

    # Nesting; callers keep the tree acyclic
    parent_collection_id: UUID | None = None

    variables: dict[str, str] = Field(default_factory=dict)
    secret_variable_names: set[str] = Field(default_factory=set)
    dynamic_variables: list[DynamicVariable] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
