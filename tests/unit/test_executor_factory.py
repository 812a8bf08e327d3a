"""Tests for executor selection and caching."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import httpx
import pytest

from chainpost.exceptions import NoExecutorFoundError
from chainpost.models import (
    GraphQLOperationType,
    GraphQLRequest,
    GraphQLSubscriptionProtocol,
    RestRequest,
    WebSocketConnectionType,
    WebSocketRequest,
)
from chainpost.services.execution.executor_factory import RequestExecutorFactory
from chainpost.services.execution.executors import (
    GraphQLRequestExecutor,
    GraphQLSubscriptionSSEExecutor,
    GraphQLSubscriptionWebSocketExecutor,
    RequestExecutor,
    RestRequestExecutor,
    WebSocketRequestExecutor,
)


@pytest.fixture
def factory() -> RequestExecutorFactory:
    client = httpx.AsyncClient()
    return RequestExecutorFactory([
        RestRequestExecutor(client),
        GraphQLRequestExecutor(client),
        GraphQLSubscriptionWebSocketExecutor(),
        GraphQLSubscriptionSSEExecutor(client),
        WebSocketRequestExecutor(),
    ])


class TestSelection:
    def test_selects_executor_per_variant(self, factory) -> None:
        assert isinstance(factory.get_executor(RestRequest()), RestRequestExecutor)
        assert isinstance(factory.get_executor(GraphQLRequest()), GraphQLRequestExecutor)
        assert isinstance(factory.get_executor(WebSocketRequest()), WebSocketRequestExecutor)

    def test_subscription_protocols_select_streaming_executors(self, factory) -> None:
        over_ws = GraphQLRequest(operation_type=GraphQLOperationType.SUBSCRIPTION)
        over_sse = GraphQLRequest(
            operation_type=GraphQLOperationType.SUBSCRIPTION,
            subscription_protocol=GraphQLSubscriptionProtocol.SSE,
        )
        assert isinstance(factory.get_executor(over_ws), GraphQLSubscriptionWebSocketExecutor)
        assert isinstance(factory.get_executor(over_sse), GraphQLSubscriptionSSEExecutor)

    def test_websocket_graphql_subscription_routes_to_subscription_executor(self, factory) -> None:
        request = WebSocketRequest(connection_type=WebSocketConnectionType.GRAPHQL_SUBSCRIPTION)
        assert isinstance(factory.get_executor(request), GraphQLSubscriptionWebSocketExecutor)

    def test_cache_does_not_mix_flavors_of_one_type(self, factory) -> None:
        assert isinstance(factory.get_executor(GraphQLRequest()), GraphQLRequestExecutor)
        subscription = GraphQLRequest(operation_type=GraphQLOperationType.SUBSCRIPTION)
        assert isinstance(factory.get_executor(subscription), GraphQLSubscriptionWebSocketExecutor)
        assert isinstance(factory.get_executor(GraphQLRequest()), GraphQLRequestExecutor)

    def test_no_executor_raises(self) -> None:
        with pytest.raises(NoExecutorFoundError):
            RequestExecutorFactory([]).get_executor(RestRequest())


class TestCache:
    def test_repeated_lookups_return_same_instance_and_skip_scan(self) -> None:
        executor = MagicMock(spec=RequestExecutor)
        executor.can_execute.return_value = True
        factory = RequestExecutorFactory([executor])

        first = factory.get_executor(RestRequest())
        second = factory.get_executor(RestRequest(url="https://other.test"))

        assert first is second is executor
        executor.can_execute.assert_called_once()

    def test_first_matching_executor_wins(self) -> None:
        first = MagicMock(spec=RequestExecutor)
        first.can_execute.return_value = True
        second = MagicMock(spec=RequestExecutor)
        second.can_execute.return_value = True

        assert RequestExecutorFactory([first, second]).get_executor(RestRequest()) is first
        second.can_execute.assert_not_called()

    def test_concurrent_lookups_share_one_cached_executor(self) -> None:
        threads = 8
        barrier = threading.Barrier(threads)

        def slow_can_execute(request) -> bool:
            # Keep lookups overlapping so several threads miss the cache together
            time.sleep(0.01)
            return True

        first = MagicMock(spec=RequestExecutor)
        first.can_execute.side_effect = slow_can_execute
        second = MagicMock(spec=RequestExecutor)
        second.can_execute.side_effect = slow_can_execute
        factory = RequestExecutorFactory([first, second])
        rest = RestRequest()
        graphql = GraphQLRequest()

        def lookup(index: int):
            barrier.wait()
            request = rest if index % 2 else graphql
            return request.executor_key, factory.get_executor(request)

        with ThreadPoolExecutor(max_workers=threads) as pool:
            results = list(pool.map(lookup, range(threads)))

        assert {executor for _, executor in results} == {first}
        assert set(factory._cache) == {rest.executor_key, graphql.executor_key}
        assert all(factory._cache[key] is executor for key, executor in results)
