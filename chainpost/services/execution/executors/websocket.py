"""Plain WebSocket request executor."""

import asyncio
import logging

import websockets
from websockets.exceptions import ConnectionClosed

from chainpost.config import get_settings
from chainpost.models.request import BaseRequest, RequestType, WebSocketConnectionType, WebSocketRequest
from chainpost.models.response import RequestResponse
from chainpost.services.execution.executors.base import RequestExecutor
from chainpost.services.execution.executors.common import (
    USER_AGENT,
    ResponseRecorder,
    build_headers,
    message_text,
    pop_header,
)

logger = logging.getLogger(__name__)


class WebSocketRequestExecutor(RequestExecutor):
    """Connects, sends the optional initial message, and records messages until close or timeout."""

    def __init__(self, receive_timeout_seconds: float | None = None):
        self.receive_timeout_seconds = (
            receive_timeout_seconds or get_settings().websocket_receive_timeout_seconds
        )

    def can_execute(self, request: BaseRequest) -> bool:
        return (
            request.type == RequestType.WEBSOCKET.value
            and request.connection_type == WebSocketConnectionType.STANDARD
        )

    async def execute(self, request: BaseRequest) -> RequestResponse:
        if not isinstance(request, WebSocketRequest):
            raise TypeError("Request must be a WebSocketRequest")

        settings = get_settings()
        recorder = ResponseRecorder(streaming=True)
        try:
            headers = build_headers(request)
            user_agent = pop_header(headers, USER_AGENT)
            protocols = [p for p in request.protocols if p and p.strip()]

            sent_headers = dict(headers)
            if user_agent:
                sent_headers[USER_AGENT] = user_agent
            recorder.sent(url=request.url, method="WEBSOCKET", headers=sent_headers, body=request.message)

            async with websockets.connect(
                request.url,
                additional_headers=headers or None,
                subprotocols=protocols or None,
                user_agent_header=user_agent,
                open_timeout=settings.request_timeout_seconds,
                max_size=settings.max_receive_size,
            ) as ws:
                recorder.stop_timing()
                # Switching Protocols
                recorder.response.status_code = 101
                recorder.response.status_message = "WebSocket connection established"

                if request.message:
                    await ws.send(request.message)
                    recorder.event(f"Sent: {request.message}", "sent")

                await self._receive(ws, recorder)

            recorder.finalize_streaming()
        except Exception as e:
            logger.warning("WebSocket request to %s failed: %s", request.url, e)
            recorder.with_exception(e)

        return recorder.build()

    async def _receive(self, ws, recorder: ResponseRecorder) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.receive_timeout_seconds
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

            recorder.event(message_text(raw), "message")
