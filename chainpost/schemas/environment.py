"""Pydantic schemas for environments."""

from uuid import UUID
from pydantic import BaseModel, Field

from chainpost.models.dynamic_variable import DynamicVariable


class EnvironmentCreate(BaseModel):
    """Schema for creating an environment."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    variables: dict[str, str] = Field(default_factory=dict)
    secret_variable_names: set[str] = Field(default_factory=set)  # Stored apart from the entity
    dynamic_variables: list[DynamicVariable] = Field(default_factory=list)


class EnvironmentUpdate(BaseModel):
    """Schema for updating an environment."""
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    variables: dict[str, str] | None = None
    secret_variable_names: set[str] | None = None
    dynamic_variables: list[DynamicVariable] | None = None


class EnvironmentSummary(BaseModel):
    """Summary schema for listing environments."""
    id: UUID
    name: str
    description: str | None = None
    is_active: bool = False
    variable_count: int = 0
