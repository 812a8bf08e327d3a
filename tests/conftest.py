"""Shared test fixtures for chainpost."""
import pytest

from chainpost.db.repository import InMemoryRepository
from chainpost.db.secrets import InMemorySecretVariablesRepository
from chainpost.models import Collection, Environment
from chainpost.services.collection_service import CollectionService
from chainpost.services.environment_service import EnvironmentService
from chainpost.services.execution.request_cloner import RequestCloner
from chainpost.services.execution.variable_resolver import VariableResolver
from chainpost.services.secret_variables_service import SecretVariablesService


@pytest.fixture
def environment() -> Environment:
    return Environment(name="Staging", variables={"baseUrl": "https://api.example.com", "token": "env-token"})


@pytest.fixture
def collection() -> Collection:
    return Collection(name="Users API", variables={"token": "collection-token"})


@pytest.fixture
def resolver() -> VariableResolver:
    return VariableResolver()


@pytest.fixture
def cloner(resolver) -> RequestCloner:
    return RequestCloner(resolver)


@pytest.fixture
def secret_variables_service() -> SecretVariablesService:
    return SecretVariablesService(InMemorySecretVariablesRepository())


@pytest.fixture
def environment_service(secret_variables_service) -> EnvironmentService:
    return EnvironmentService(InMemoryRepository(), secret_variables_service)


@pytest.fixture
def collection_service(secret_variables_service) -> CollectionService:
    return CollectionService(InMemoryRepository(), secret_variables_service)
