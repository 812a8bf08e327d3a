"""Service wiring and FastAPI dependency providers."""

from functools import lru_cache

import httpx
from fastapi import Depends

from chainpost.config import Settings, get_settings
from chainpost.db.repository import InMemoryRepository
from chainpost.db.secrets import InMemorySecretVariablesRepository
from chainpost.services.active_environment_service import ActiveEnvironmentService
from chainpost.services.collection_service import CollectionService
from chainpost.services.data_generator import DataGeneratorService
from chainpost.services.environment_service import EnvironmentService
from chainpost.services.execution.executor_factory import RequestExecutorFactory
from chainpost.services.execution.executors import (
    GraphQLRequestExecutor,
    GraphQLSubscriptionSSEExecutor,
    GraphQLSubscriptionWebSocketExecutor,
    RestRequestExecutor,
    WebSocketRequestExecutor,
)
from chainpost.services.execution.request_cloner import RequestCloner
from chainpost.services.execution.response_extractor import ResponseValueExtractor
from chainpost.services.execution.variable_resolver import VariableResolver
from chainpost.services.flow_service import FlowService
from chainpost.services.history_service import RequestHistoryService
from chainpost.services.request_service import RequestService
from chainpost.services.secret_variables_service import SecretVariablesService


class ServiceContainer:
    """
    Builds the object graph once per application.

    One httpx.AsyncClient is shared by every HTTP executor so connections are
    pooled across requests and flows.
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None, settings: Settings | None = None):
        settings = settings or get_settings()
        self.http_client = http_client or httpx.AsyncClient(
            timeout=settings.request_timeout_seconds,
            follow_redirects=settings.follow_redirects,
            verify=settings.verify_ssl,
        )

        self.secret_variables_service = SecretVariablesService(InMemorySecretVariablesRepository())
        self.environment_service = EnvironmentService(InMemoryRepository(), self.secret_variables_service)
        self.collection_service = CollectionService(InMemoryRepository(), self.secret_variables_service)
        self.active_environment_service = ActiveEnvironmentService(self.environment_service)
        self.history_service = RequestHistoryService(InMemoryRepository(), settings.history_max_entries)

        self.data_generator = DataGeneratorService()
        self.variable_resolver = VariableResolver(self.data_generator)
        self.request_cloner = RequestCloner(self.variable_resolver)
        self.response_extractor = ResponseValueExtractor()

        # can_execute predicates are disjoint, so registration order does not affect selection
        self.executor_factory = RequestExecutorFactory([
            RestRequestExecutor(self.http_client),
            GraphQLRequestExecutor(self.http_client),
            GraphQLSubscriptionWebSocketExecutor(),
            GraphQLSubscriptionSSEExecutor(self.http_client),
            WebSocketRequestExecutor(),
        ])

        self.request_service = RequestService(
            repository=InMemoryRepository(),
            executor_factory=self.executor_factory,
            request_cloner=self.request_cloner,
            variable_resolver=self.variable_resolver,
            response_extractor=self.response_extractor,
            environment_service=self.environment_service,
            collection_service=self.collection_service,
            active_environment_service=self.active_environment_service,
            history_service=self.history_service,
        )
        self.flow_service = FlowService(
            repository=InMemoryRepository(),
            request_service=self.request_service,
            environment_service=self.environment_service,
            collection_service=self.collection_service,
        )

    async def aclose(self) -> None:
        await self.http_client.aclose()


@lru_cache
def get_container() -> ServiceContainer:
    return ServiceContainer()


def get_environment_service(container: ServiceContainer = Depends(get_container)) -> EnvironmentService:
    return container.environment_service


def get_collection_service(container: ServiceContainer = Depends(get_container)) -> CollectionService:
    return container.collection_service


def get_active_environment_service(
    container: ServiceContainer = Depends(get_container),
) -> ActiveEnvironmentService:
    return container.active_environment_service


def get_request_service(container: ServiceContainer = Depends(get_container)) -> RequestService:
    return container.request_service


def get_flow_service(container: ServiceContainer = Depends(get_container)) -> FlowService:
    return container.flow_service


def get_history_service(container: ServiceContainer = Depends(get_container)) -> RequestHistoryService:
    return container.history_service
