"""Cloning requests and expanding their templated fields."""

from typing import Callable

from chainpost.exceptions import UnsupportedRequestTypeError
from chainpost.models.collection import Collection
from chainpost.models.environment import Environment
from chainpost.models.request import (
    BaseRequest,
    GraphQLRequest,
    RequestType,
    RestRequest,
    WebSocketRequest,
)
from chainpost.services.execution.variable_resolver import VariableResolver


class RequestCloner:
    """
    Produces resolved copies of stored requests.

    The stored request is never modified: every map and list is copied by
    value before any field is rewritten, so concurrent resolutions of the same
    request cannot see each other's values.
    """

    def __init__(self, variable_resolver: VariableResolver):
        self.variable_resolver = variable_resolver
        self._variant_resolvers: dict[str, Callable[..., None]] = {
            RequestType.REST.value: self._resolve_rest,
            RequestType.GRAPHQL.value: self._resolve_graphql,
            RequestType.WEBSOCKET.value: self._resolve_websocket,
        }

    def clone(self, request: BaseRequest) -> BaseRequest:
        """Deep-copy a request of any supported variant."""
        self._variant_resolver_for(request)
        return request.model_copy(deep=True)

    def resolve(
        self,
        request: BaseRequest,
        environment: Environment,
        collection: Collection | None = None,
    ) -> BaseRequest:
        """
        Clone a request and resolve every templated field on the clone.

        Raises:
            UnsupportedRequestTypeError: If the request variant has no resolve rule
        """
        variant_resolver = self._variant_resolver_for(request)
        clone = request.model_copy(deep=True)

        def resolve(text: str | None) -> str | None:
            return self.variable_resolver.resolve(text, environment, collection, request)

        clone.url = resolve(clone.url)
        clone.headers = {resolve(k): resolve(v) for k, v in clone.headers.items()}
        if clone.basic_auth_username:
            clone.basic_auth_username = resolve(clone.basic_auth_username)
        if clone.basic_auth_password:
            clone.basic_auth_password = resolve(clone.basic_auth_password)
        if clone.bearer_token:
            clone.bearer_token = resolve(clone.bearer_token)

        variant_resolver(clone, resolve)
        return clone

    def _variant_resolver_for(self, request: BaseRequest) -> Callable[..., None]:
        request_type = getattr(request, "type", type(request).__name__)
        variant_resolver = self._variant_resolvers.get(request_type)
        if variant_resolver is None:
            raise UnsupportedRequestTypeError(str(request_type))
        return variant_resolver

    @staticmethod
    def _resolve_rest(request: RestRequest, resolve: Callable[[str | None], str | None]) -> None:
        if request.body:
            request.body = resolve(request.body)
        request.query_parameters = {
            resolve(k): resolve(v) for k, v in request.query_parameters.items()
        }
        for form_field in request.form_data_fields:
            form_field.key = resolve(form_field.key)
            form_field.value = resolve(form_field.value)
        for form_file in request.form_data_files:
            form_file.file_path = resolve(form_file.file_path)

    @staticmethod
    def _resolve_graphql(request: GraphQLRequest, resolve: Callable[[str | None], str | None]) -> None:
        if request.query:
            request.query = resolve(request.query)
        if request.variables:
            request.variables = resolve(request.variables)
        if request.operation_name:
            request.operation_name = resolve(request.operation_name)

    @staticmethod
    def _resolve_websocket(request: WebSocketRequest, resolve: Callable[[str | None], str | None]) -> None:
        if request.message:
            request.message = resolve(request.message)
        request.protocols = [resolve(protocol) for protocol in request.protocols]
