"""GraphQL subscriptions over WebSocket (graphql-transport-ws)."""

import asyncio
import json
import logging
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed

from chainpost.config import get_settings
from chainpost.models.request import (
    BaseRequest,
    GraphQLOperationType,
    GraphQLRequest,
    GraphQLSubscriptionProtocol,
    RequestType,
    WebSocketConnectionType,
    WebSocketRequest,
)
from chainpost.models.response import RequestResponse
from chainpost.services.execution.executors.base import RequestExecutor
from chainpost.services.execution.executors.common import (
    USER_AGENT,
    ResponseRecorder,
    build_headers,
    graphql_payload,
    message_text,
    pop_header,
    to_websocket_url,
)

logger = logging.getLogger(__name__)

GRAPHQL_TRANSPORT_WS = "graphql-transport-ws"
GRAPHQL_WS = "graphql-ws"

# graphql-transport-ws message types
CONNECTION_INIT = "connection_init"
CONNECTION_ACK = "connection_ack"
SUBSCRIBE = "subscribe"
NEXT = "next"
ERROR = "error"
COMPLETE = "complete"

SUBSCRIPTION_ID = "1"


class GraphQLSubscriptionWebSocketExecutor(RequestExecutor):
    """
    Runs a GraphQL subscription over the graphql-transport-ws protocol.

    Sequence: connection_init, wait for connection_ack, subscribe with id "1",
    then record next/error messages until complete, server close or timeout.
    Also serves WebSocket requests flagged as GraphQL subscriptions, using
    their message as the subscription query.
    """

    def __init__(self, timeout_seconds: float | None = None, ack_timeout_seconds: float | None = None):
        settings = get_settings()
        self.timeout_seconds = timeout_seconds or settings.subscription_timeout_seconds
        self.ack_timeout_seconds = ack_timeout_seconds or settings.subscription_ack_timeout_seconds

    def can_execute(self, request: BaseRequest) -> bool:
        if request.type == RequestType.GRAPHQL.value:
            return (
                request.operation_type == GraphQLOperationType.SUBSCRIPTION
                and request.subscription_protocol == GraphQLSubscriptionProtocol.WEBSOCKET
            )
        if request.type == RequestType.WEBSOCKET.value:
            return request.connection_type == WebSocketConnectionType.GRAPHQL_SUBSCRIPTION
        return False

    async def execute(self, request: BaseRequest) -> RequestResponse:
        if not isinstance(request, (GraphQLRequest, WebSocketRequest)):
            raise TypeError("Request must be a GraphQLRequest or WebSocketRequest")

        settings = get_settings()
        recorder = ResponseRecorder(streaming=True)
        try:
            payload = self._payload(request)
            headers = build_headers(request)
            user_agent = pop_header(headers, USER_AGENT)

            sent_headers = dict(headers)
            if user_agent:
                sent_headers[USER_AGENT] = user_agent
            recorder.sent(
                url=request.url,
                method="GRAPHQL_SUBSCRIPTION_WS",
                headers=sent_headers,
                body=json.dumps(payload),
            )

            async with websockets.connect(
                to_websocket_url(request.url),
                additional_headers=headers or None,
                subprotocols=[GRAPHQL_TRANSPORT_WS, GRAPHQL_WS],
                user_agent_header=user_agent,
                open_timeout=settings.request_timeout_seconds,
                max_size=settings.max_receive_size,
            ) as ws:
                recorder.stop_timing()
                recorder.response.status_code = 101
                recorder.response.status_message = "WebSocket connection established"
                try:
                    await self._run_subscription(ws, payload, recorder)
                finally:
                    await self._send_complete(ws, recorder)

            recorder.finalize_streaming()
        except Exception as e:
            logger.warning("WebSocket subscription to %s failed: %s", request.url, e)
            recorder.with_exception(e)

        return recorder.build()

    @staticmethod
    def _payload(request: GraphQLRequest | WebSocketRequest) -> dict[str, Any]:
        if request.type == RequestType.GRAPHQL.value:
            return graphql_payload(request)
        return {"query": request.message or "", "variables": None, "operationName": None}

    async def _run_subscription(self, ws, payload: dict[str, Any], recorder: ResponseRecorder) -> None:
        await ws.send(json.dumps({"type": CONNECTION_INIT}))
        recorder.event(f"Sent: {CONNECTION_INIT}", "sent")

        if not await self._wait_for_ack(ws, recorder):
            recorder.response.status_message = f"Failed to receive {CONNECTION_ACK}"
            return

        await ws.send(json.dumps({"id": SUBSCRIPTION_ID, "type": SUBSCRIBE, "payload": payload}))
        recorder.event("Sent: subscribe with query", "sent")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_seconds
        while True:
            remaining = deadline - loop.time()
            try:
                if remaining <= 0:
                    raise asyncio.TimeoutError
                raw = await asyncio.wait_for(ws.recv(), timeout=remaining)
            except asyncio.TimeoutError:
                recorder.event("Timeout reached, closing connection", "timeout")
                return
            except ConnectionClosed:
                recorder.event("Connection closed by server", "close")
                return

            text = message_text(raw)
            try:
                message = json.loads(text)
            except json.JSONDecodeError:
                recorder.event(text, "unknown")
                continue

            message_type = message.get("type") if isinstance(message, dict) else None
            if message_type == NEXT:
                recorder.event(json.dumps(message.get("payload"), indent=2), "data")
            elif message_type == COMPLETE:
                recorder.event("Subscription completed", "complete")
                return
            elif message_type == ERROR:
                recorder.event(f"Error: {json.dumps(message.get('payload'), indent=2)}", "error")
            else:
                recorder.event(text, message_type or "unknown")

    async def _wait_for_ack(self, ws, recorder: ResponseRecorder) -> bool:
        try:
            raw = await asyncio.wait_for(ws.recv(), timeout=self.ack_timeout_seconds)
            message_type = json.loads(message_text(raw)).get("type")
        except (asyncio.TimeoutError, ConnectionClosed, json.JSONDecodeError, AttributeError) as e:
            logger.debug("No %s received: %s", CONNECTION_ACK, e)
            return False

        recorder.event(f"Received: {message_type}", "received")
        return message_type == CONNECTION_ACK

    @staticmethod
    async def _send_complete(ws, recorder: ResponseRecorder) -> None:
        try:
            await ws.send(json.dumps({"id": SUBSCRIPTION_ID, "type": COMPLETE}))
        except ConnectionClosed:
            # Server already closed, nothing to complete
            return
        except Exception as e:
            recorder.event(f"Warning: Failed to send complete message: {e}", "warning")
