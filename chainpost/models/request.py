"""Request definitions for the REST, GraphQL and WebSocket variants."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field

from chainpost.models.dynamic_variable import DynamicVariable


class RequestType(str, Enum):
    REST = "rest"
    GRAPHQL = "graphql"
    WEBSOCKET = "websocket"


class AuthenticationType(str, Enum):
    NONE = "none"
    BASIC = "basic"
    BEARER_TOKEN = "bearer_token"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class BodyType(str, Enum):
    NONE = "none"
    JSON = "json"
    XML = "xml"
    TEXT = "text"
    HTML = "html"
    JAVASCRIPT = "javascript"
    FORM_DATA = "form_data"


class GraphQLOperationType(str, Enum):
    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"


class GraphQLSubscriptionProtocol(str, Enum):
    WEBSOCKET = "websocket"
    SSE = "sse"


class WebSocketConnectionType(str, Enum):
    STANDARD = "standard"
    GRAPHQL_SUBSCRIPTION = "graphql_subscription"


class ResponseExtraction(BaseModel):
    """Rule for extracting a value from a response body into a variable."""
    id: UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    # JSONPath for JSON/GraphQL bodies ($.data.user.id), XPath for XML (//user/id)
    pattern: str = ""
    # If None, the value is only shown to the user
    variable_name: str | None = None
    save_to_collection: bool = False
    is_enabled: bool = True


class FormDataField(BaseModel):
    """Text field in a multipart/form-data body."""
    key: str = ""
    value: str = ""
    enabled: bool = True


class FormDataFile(BaseModel):
    """File attachment in a multipart/form-data body."""
    key: str = ""
    file_path: str = ""
    content_type: str | None = None
    enabled: bool = True


class BaseRequest(BaseModel):
    """Fields shared by every request variant."""
    id: UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    description: str | None = None
    url: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    disabled_headers: set[str] = Field(default_factory=set)
    dynamic_variables: list[DynamicVariable] = Field(default_factory=list)
    collection_id: UUID | None = None
    order_index: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Authentication
    auth_type: AuthenticationType = AuthenticationType.NONE
    basic_auth_username: str | None = None
    basic_auth_password: str | None = None
    bearer_token: str | None = None

    response_extractions: list[ResponseExtraction] = Field(default_factory=list)

    @property
    def executor_key(self) -> tuple:
        """Key identifying which executor can run this request."""
        return (self.type,)

    def enabled_headers(self) -> dict[str, str]:
        return {k: v for k, v in self.headers.items() if k not in self.disabled_headers}


class RestRequest(BaseRequest):
    type: Literal["rest"] = "rest"
    method: HttpMethod = HttpMethod.GET
    body: str | None = None
    content_type: str | None = None  # Explicit override, else inferred from body_type
    body_type: BodyType = BodyType.JSON
    query_parameters: dict[str, str] = Field(default_factory=dict)
    disabled_query_parameters: set[str] = Field(default_factory=set)
    form_data_fields: list[FormDataField] = Field(default_factory=list)
    form_data_files: list[FormDataFile] = Field(default_factory=list)

    def enabled_query_parameters(self) -> dict[str, str]:
        return {
            k: v for k, v in self.query_parameters.items()
            if k not in self.disabled_query_parameters
        }


class GraphQLRequest(BaseRequest):
    type: Literal["graphql"] = "graphql"
    query: str = ""
    variables: str | None = None  # JSON text
    operation_name: str | None = None
    operation_type: GraphQLOperationType = GraphQLOperationType.QUERY
    subscription_protocol: GraphQLSubscriptionProtocol = GraphQLSubscriptionProtocol.WEBSOCKET

    @property
    def executor_key(self) -> tuple:
        if self.operation_type == GraphQLOperationType.SUBSCRIPTION:
            return (self.type, self.operation_type, self.subscription_protocol)
        return (self.type,)


class WebSocketRequest(BaseRequest):
    type: Literal["websocket"] = "websocket"
    message: str | None = None
    protocols: list[str] = Field(default_factory=list)
    connection_type: WebSocketConnectionType = WebSocketConnectionType.STANDARD

    @property
    def executor_key(self) -> tuple:
        return (self.type, self.connection_type)


Request = Annotated[
    Union[RestRequest, GraphQLRequest, WebSocketRequest],
    Field(discriminator="type"),
]
