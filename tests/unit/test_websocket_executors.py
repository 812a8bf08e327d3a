"""Tests for the WebSocket executors against a local websockets server."""

import json
from contextlib import asynccontextmanager

import pytest
import websockets

from chainpost.models import GraphQLOperationType, GraphQLRequest, WebSocketConnectionType, WebSocketRequest
from chainpost.services.execution.executors import GraphQLSubscriptionWebSocketExecutor, WebSocketRequestExecutor
from chainpost.services.execution.executors.common import to_websocket_url


@asynccontextmanager
async def serve(handler, **kwargs):
    async with websockets.serve(handler, "127.0.0.1", 0, **kwargs) as server:
        port = server.sockets[0].getsockname()[1]
        yield f"ws://127.0.0.1:{port}"


async def echo_twice_then_close(ws) -> None:
    message = await ws.recv()
    await ws.send(f"echo: {message}")
    await ws.send("bye")
    await ws.close()


async def graphql_transport_ws(ws) -> None:
    init = json.loads(await ws.recv())
    assert init["type"] == "connection_init"
    await ws.send(json.dumps({"type": "connection_ack"}))

    subscribe = json.loads(await ws.recv())
    await ws.send(json.dumps({"id": subscribe["id"], "type": "next", "payload": {"data": {"tick": 1}}}))
    await ws.send(json.dumps({"id": subscribe["id"], "type": "error", "payload": [{"message": "late"}]}))
    await ws.send(json.dumps({"id": subscribe["id"], "type": "complete"}))
    # Drain the client's complete message
    async for _ in ws:
        pass


class TestWebSocketExecutor:
    async def test_sends_message_and_records_replies(self) -> None:
        async with serve(echo_twice_then_close) as url:
            request = WebSocketRequest(url=url, message="hello")
            response = await WebSocketRequestExecutor(receive_timeout_seconds=5).execute(request)

        assert response.status_code == 101
        assert response.is_streaming
        events = [(e.event_type, e.data) for e in response.stream_events]
        assert events[:3] == [("sent", "Sent: hello"), ("message", "echo: hello"), ("message", "bye")]
        assert events[-1][0] == "close"
        assert response.sent_request.method == "WEBSOCKET"
        assert response.sent_request.body == "hello"
        assert "] message: echo: hello" in response.body

    async def test_times_out_when_server_is_silent(self) -> None:
        async def silent(ws) -> None:
            async for _ in ws:
                pass

        async with serve(silent) as url:
            response = await WebSocketRequestExecutor(receive_timeout_seconds=0.2).execute(WebSocketRequest(url=url))

        assert response.status_code == 101
        assert response.stream_events[-1].event_type == "timeout"

    async def test_negotiates_subprotocol(self) -> None:
        chosen = []

        async def handler(ws) -> None:
            chosen.append(ws.subprotocol)
            await ws.close()

        async with serve(handler, subprotocols=["chat"]) as url:
            request = WebSocketRequest(url=url, protocols=["chat", "  "])
            await WebSocketRequestExecutor(receive_timeout_seconds=1).execute(request)

        assert chosen == ["chat"]

    async def test_connection_failure_yields_status_zero(self) -> None:
        async with serve(echo_twice_then_close) as url:
            pass

        response = await WebSocketRequestExecutor(receive_timeout_seconds=1).execute(WebSocketRequest(url=url))

        assert response.status_code == 0
        assert response.status_message.startswith("Error: ")


class TestGraphQLSubscriptionWebSocketExecutor:
    async def test_runs_graphql_transport_ws_sequence(self) -> None:
        async with serve(graphql_transport_ws, subprotocols=["graphql-transport-ws"]) as url:
            request = GraphQLRequest(
                url=url.replace("ws://", "http://"),
                query="subscription { tick }",
                operation_type=GraphQLOperationType.SUBSCRIPTION,
            )
            response = await GraphQLSubscriptionWebSocketExecutor(timeout_seconds=5).execute(request)

        assert response.status_code == 101
        types = [e.event_type for e in response.stream_events]
        assert types == ["sent", "received", "sent", "data", "error", "complete"]
        assert json.loads(response.stream_events[3].data) == {"data": {"tick": 1}}
        assert response.sent_request.method == "GRAPHQL_SUBSCRIPTION_WS"

    async def test_websocket_request_flagged_as_subscription(self) -> None:
        async with serve(graphql_transport_ws, subprotocols=["graphql-transport-ws"]) as url:
            request = WebSocketRequest(
                url=url,
                message="subscription { tick }",
                connection_type=WebSocketConnectionType.GRAPHQL_SUBSCRIPTION,
            )
            response = await GraphQLSubscriptionWebSocketExecutor(timeout_seconds=5).execute(request)

        assert json.loads(response.sent_request.body)["query"] == "subscription { tick }"
        assert response.stream_events[-1].event_type == "complete"

    async def test_missing_ack_reported(self) -> None:
        async def no_ack(ws) -> None:
            async for _ in ws:
                pass

        async with serve(no_ack, subprotocols=["graphql-transport-ws"]) as url:
            request = GraphQLRequest(url=url, operation_type=GraphQLOperationType.SUBSCRIPTION)
            executor = GraphQLSubscriptionWebSocketExecutor(timeout_seconds=1, ack_timeout_seconds=0.2)
            response = await executor.execute(request)

        assert response.status_message == "Failed to receive connection_ack"


@pytest.mark.parametrize("url, expected", [
    ("http://host/graphql", "ws://host/graphql"),
    ("https://host/graphql", "wss://host/graphql"),
    ("ws://host", "ws://host"),
    ("wss://host", "wss://host"),
    ("host/graphql", "wss://host/graphql"),
])
def test_to_websocket_url(url, expected) -> None:
    assert to_websocket_url(url) == expected
