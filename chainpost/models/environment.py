"""Environment model: a named set of variables selected at execution time."""

import uuid
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from chainpost.models.dynamic_variable import DynamicVariable


class Environment(BaseModel):
    """Environment-specific variable set (e.g. Development, Staging, Production)."""
    id: UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    description: str | None = None

    # Structure: {var_name: value}; secret values are merged in only after load
    variables: dict[str, str] = Field(default_factory=dict)
    secret_variable_names: set[str] = Field(default_factory=set)
    dynamic_variables: list[DynamicVariable] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
