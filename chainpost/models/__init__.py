from chainpost.models.dynamic_variable import (
    ConstraintRule,
    ConstraintType,
    DataGeneratorType,
    DynamicVariable,
)
from chainpost.models.request import (
    AuthenticationType,
    BaseRequest,
    BodyType,
    FormDataField,
    FormDataFile,
    GraphQLOperationType,
    GraphQLRequest,
    GraphQLSubscriptionProtocol,
    HttpMethod,
    Request,
    RequestType,
    ResponseExtraction,
    RestRequest,
    WebSocketConnectionType,
    WebSocketRequest,
)
from chainpost.models.environment import Environment
from chainpost.models.collection import Collection
from chainpost.models.response import RequestResponse, SentRequest, StreamEvent
from chainpost.models.flow import (
    Flow,
    FlowExecutionResult,
    FlowExecutionStatus,
    FlowStep,
    FlowStepResult,
    FlowStepStatus,
)
from chainpost.models.history import RequestHistoryEntry

__all__ = [
    "AuthenticationType",
    "BaseRequest",
    "BodyType",
    "Collection",
    "ConstraintRule",
    "ConstraintType",
    "DataGeneratorType",
    "DynamicVariable",
    "Environment",
    "Flow",
    "FlowExecutionResult",
    "FlowExecutionStatus",
    "FlowStep",
    "FlowStepResult",
    "FlowStepStatus",
    "FormDataField",
    "FormDataFile",
    "GraphQLOperationType",
    "GraphQLRequest",
    "GraphQLSubscriptionProtocol",
    "HttpMethod",
    "Request",
    "RequestHistoryEntry",
    "RequestResponse",
    "RequestType",
    "ResponseExtraction",
    "RestRequest",
    "SentRequest",
    "StreamEvent",
    "WebSocketConnectionType",
    "WebSocketRequest",
]
