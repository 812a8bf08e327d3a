"""Pydantic schemas for collections."""

from uuid import UUID
from pydantic import BaseModel, Field

from chainpost.models.dynamic_variable import DynamicVariable


class CollectionCreate(BaseModel):
    """Schema for creating a collection."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    parent_collection_id: UUID | None = None
    variables: dict[str, str] = Field(default_factory=dict)
    secret_variable_names: set[str] = Field(default_factory=set)
    dynamic_variables: list[DynamicVariable] = Field(default_factory=list)


class CollectionUpdate(BaseModel):
    """Schema for updating a collection."""
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    parent_collection_id: UUID | None = None
    variables: dict[str, str] | None = None
    secret_variable_names: set[str] | None = None
    dynamic_variables: list[DynamicVariable] | None = None


class CollectionSummary(BaseModel):
    """Summary schema for listing collections."""
    id: UUID
    name: str
    description: str | None = None
    parent_collection_id: UUID | None = None
    variable_count: int = 0
