"""Request management and single-request execution."""

import logging
from datetime import datetime
from uuid import UUID

from chainpost.db.repository import Repository
from chainpost.exceptions import EntityNotFoundError
from chainpost.models.collection import Collection
from chainpost.models.environment import Environment
from chainpost.models.history import RequestHistoryEntry
from chainpost.models.request import BaseRequest
from chainpost.models.response import RequestResponse
from chainpost.services.active_environment_service import ActiveEnvironmentService
from chainpost.services.collection_service import CollectionService
from chainpost.services.environment_service import EnvironmentService
from chainpost.services.execution.executor_factory import RequestExecutorFactory
from chainpost.services.execution.executors.common import APPLICATION_JSON, CONTENT_TYPE
from chainpost.services.execution.request_cloner import RequestCloner
from chainpost.services.execution.response_extractor import ResponseValueExtractor
from chainpost.services.execution.variable_resolver import VariableResolver
from chainpost.services.history_service import RequestHistoryService

logger = logging.getLogger(__name__)


class RequestService:
    """
    CRUD for stored requests plus the single-request execution pipeline:
    select executor, resolve a clone, execute, extract response values into
    variables, record history.
    """

    def __init__(
        self,
        repository: Repository[BaseRequest],
        executor_factory: RequestExecutorFactory,
        request_cloner: RequestCloner,
        variable_resolver: VariableResolver,
        response_extractor: ResponseValueExtractor,
        environment_service: EnvironmentService,
        collection_service: CollectionService,
        active_environment_service: ActiveEnvironmentService,
        history_service: RequestHistoryService | None = None,
    ):
        self.repository = repository
        self.executor_factory = executor_factory
        self.request_cloner = request_cloner
        self.variable_resolver = variable_resolver
        self.response_extractor = response_extractor
        self.environment_service = environment_service
        self.collection_service = collection_service
        self.active_environment_service = active_environment_service
        self.history_service = history_service

    async def create_request(self, request: BaseRequest) -> BaseRequest:
        request.created_at = datetime.utcnow()
        return await self.repository.add(request)

    async def get_all_requests(self) -> list[BaseRequest]:
        return await self.repository.get_all()

    async def get_request(self, request_id: UUID) -> BaseRequest | None:
        return await self.repository.get_by_id(request_id)

    async def get_request_or_raise(self, request_id: UUID) -> BaseRequest:
        request = await self.repository.get_by_id(request_id)
        if request is None:
            raise EntityNotFoundError("Request", request_id)
        return request

    async def get_requests_by_collection(self, collection_id: UUID) -> list[BaseRequest]:
        requests = [r for r in await self.repository.get_all() if r.collection_id == collection_id]
        return sorted(requests, key=lambda r: (r.order_index, r.created_at))

    async def update_request(self, request: BaseRequest) -> BaseRequest:
        return await self.repository.update(request)

    async def delete_request(self, request_id: UUID) -> None:
        await self.repository.delete(request_id)

    async def move_request(self, request_id: UUID, move_up: bool) -> None:
        """Move a request one place up or down among its collection siblings, renumbering them."""
        request = await self.get_request_or_raise(request_id)
        siblings = sorted(
            (r for r in await self.repository.get_all() if r.collection_id == request.collection_id),
            key=lambda r: (r.order_index, r.created_at),
        )
        index = next(i for i, r in enumerate(siblings) if r.id == request_id)
        target = index - 1 if move_up else index + 1
        if target < 0 or target >= len(siblings):
            return

        siblings[index], siblings[target] = siblings[target], siblings[index]
        for position, sibling in enumerate(siblings):
            if sibling.order_index != position:
                sibling.order_index = position
                await self.repository.update(sibling)

    async def execute_request(
        self,
        request: BaseRequest,
        environment: Environment | None = None,
        collection: Collection | None = None,
        persist_variables: bool = True,
    ) -> RequestResponse:
        """
        Execute a request against an environment and collection.

        Args:
            request: Stored request; never modified
            environment: Variables to resolve against; defaults to the active environment
            collection: Collection variables; defaults to the request's own collection
            persist_variables: Save extracted variables back through the services.
                Flow runs pass False and read the values off the objects instead.

        Returns:
            The executor's response

        Raises:
            NoExecutorFoundError: If no executor accepts the request
            UnsupportedRequestTypeError: If the request cannot be cloned
        """
        executor = self.executor_factory.get_executor(request)

        if environment is None:
            environment = await self.active_environment_service.get_active_environment()
        if collection is None and request.collection_id is not None:
            collection = await self.collection_service.get(request.collection_id)

        if environment is None:
            # Placeholders stay as written
            logger.debug("No environment for %s, executing without variable resolution", request.name)
            resolved = self.request_cloner.clone(request)
        else:
            resolved = self.request_cloner.resolve(request, environment, collection)

        response = await executor.execute(resolved)

        if environment is not None:
            await self._apply_extractions(request, response, environment, collection, persist_variables)

        if self.history_service is not None and response.sent_request is not None:
            await self.history_service.add_entry(RequestHistoryEntry(
                request_name=request.name,
                request_type=request.type,
                sent_request=response.sent_request,
                response=response,
                request_id=request.id,
                environment_id=environment.id if environment is not None else None,
                collection_id=request.collection_id,
            ))

        return response

    async def _apply_extractions(
        self,
        request: BaseRequest,
        response: RequestResponse,
        environment: Environment,
        collection: Collection | None,
        persist_variables: bool,
    ) -> None:
        extractions = [e for e in request.response_extractions if e.is_enabled]
        if not extractions or not response.body.strip():
            return

        content_type = response.header(CONTENT_TYPE) or APPLICATION_JSON
        environment_changed = collection_changed = False

        for extraction in extractions:
            value = self.response_extractor.extract(response.body, extraction.pattern, content_type)
            if value is None:
                logger.debug("Extraction %r matched nothing in %s response", extraction.pattern, request.name)
                continue
            if not extraction.variable_name:
                continue

            self.variable_resolver.set_variable_value(
                extraction.variable_name,
                value,
                environment,
                collection,
                extraction.save_to_collection,
            )
            if extraction.save_to_collection and collection is not None:
                collection_changed = True
            else:
                environment_changed = True

        if not persist_variables:
            return
        if environment_changed:
            await self.environment_service.update(environment)
        if collection_changed:
            await self.collection_service.update(collection)
