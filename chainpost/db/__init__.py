from chainpost.db.repository import InMemoryRepository, Repository
from chainpost.db.secrets import (
    InMemorySecretVariablesRepository,
    SecretScope,
    SecretVariablesRepository,
)

__all__ = [
    "InMemoryRepository",
    "InMemorySecretVariablesRepository",
    "Repository",
    "SecretScope",
    "SecretVariablesRepository",
]
