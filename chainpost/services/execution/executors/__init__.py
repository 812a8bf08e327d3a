from chainpost.services.execution.executors.base import RequestExecutor
from chainpost.services.execution.executors.graphql import GraphQLRequestExecutor
from chainpost.services.execution.executors.graphql_subscription_sse import GraphQLSubscriptionSSEExecutor
from chainpost.services.execution.executors.graphql_subscription_ws import GraphQLSubscriptionWebSocketExecutor
from chainpost.services.execution.executors.rest import RestRequestExecutor
from chainpost.services.execution.executors.websocket import WebSocketRequestExecutor

__all__ = [
    "RequestExecutor",
    "RestRequestExecutor",
    "GraphQLRequestExecutor",
    "GraphQLSubscriptionSSEExecutor",
    "GraphQLSubscriptionWebSocketExecutor",
    "WebSocketRequestExecutor",
]
