"""GraphQL subscriptions over Server-Sent Events."""

import asyncio
import json
import logging

import httpx

from chainpost.config import get_settings
from chainpost.models.request import (
    BaseRequest,
    GraphQLOperationType,
    GraphQLRequest,
    GraphQLSubscriptionProtocol,
    RequestType,
)
from chainpost.models.response import RequestResponse
from chainpost.services.execution.executors.base import RequestExecutor
from chainpost.services.execution.executors.common import (
    ACCEPT,
    APPLICATION_JSON,
    CONTENT_TYPE,
    TEXT_EVENT_STREAM,
    ResponseRecorder,
    build_headers,
    build_http_request,
    capture_request_headers,
    graphql_payload,
    set_header,
)

logger = logging.getLogger(__name__)

DEFAULT_EVENT_TYPE = "message"


class SSEParser:
    """Incremental text/event-stream parser yielding (event_type, data) pairs."""

    def __init__(self):
        self._data: list[str] = []
        self._event_type = DEFAULT_EVENT_TYPE

    def feed(self, line: str) -> tuple[str, str] | None:
        """Consume one line; return a completed event when a blank line ends it."""
        if not line.strip():
            return self.flush()
        if line.startswith(":"):
            # Comment
            return None
        if line.startswith("event:"):
            self._event_type = line[len("event:"):].strip()
        elif line.startswith("data:"):
            self._data.append(line[len("data:"):].strip())
        return None

    def flush(self) -> tuple[str, str] | None:
        if not self._data:
            return None
        event = (self._event_type, "\n".join(self._data))
        self._data = []
        self._event_type = DEFAULT_EVENT_TYPE
        return event


class GraphQLSubscriptionSSEExecutor(RequestExecutor):
    """Runs a GraphQL subscription over SSE, collecting events until the stream ends or times out."""

    def __init__(self, client: httpx.AsyncClient, timeout_seconds: float | None = None):
        self.client = client
        self.timeout_seconds = timeout_seconds

    def can_execute(self, request: BaseRequest) -> bool:
        return (
            request.type == RequestType.GRAPHQL.value
            and request.operation_type == GraphQLOperationType.SUBSCRIPTION
            and request.subscription_protocol == GraphQLSubscriptionProtocol.SSE
        )

    async def execute(self, request: BaseRequest) -> RequestResponse:
        if not isinstance(request, GraphQLRequest):
            raise TypeError("Request must be a GraphQLRequest")

        recorder = ResponseRecorder(streaming=True)
        try:
            body = json.dumps(graphql_payload(request))
            headers = build_headers(request)
            set_header(headers, ACCEPT, TEXT_EVENT_STREAM)
            set_header(headers, CONTENT_TYPE, APPLICATION_JSON)

            http_request = build_http_request(
                self.client, "POST", request.url, headers, content=body.encode("utf-8")
            )
            recorder.sent(
                url=request.url,
                method="GRAPHQL_SUBSCRIPTION_SSE",
                headers=capture_request_headers(http_request),
                body=body,
            )

            http_response = await self.client.send(http_request, stream=True)
            try:
                recorder.stop_timing()
                recorder.with_http_response(http_response)
                if http_response.is_success:
                    await self._collect_events(http_response, recorder)
            finally:
                await http_response.aclose()

            recorder.finalize_streaming()
        except Exception as e:
            logger.warning("SSE subscription to %s failed: %s", request.url, e)
            recorder.with_exception(e)

        return recorder.build()

    async def _collect_events(self, http_response: httpx.Response, recorder: ResponseRecorder) -> None:
        parser = SSEParser()
        timeout = self.timeout_seconds or get_settings().subscription_timeout_seconds

        async def read_stream() -> None:
            async for line in http_response.aiter_lines():
                event = parser.feed(line)
                if event is not None:
                    recorder.event(event[1], event[0])

        try:
            await asyncio.wait_for(read_stream(), timeout=timeout)
        except asyncio.TimeoutError:
            recorder.event("Timeout reached, closing connection", "timeout")

        remaining = parser.flush()
        if remaining is not None:
            recorder.event(remaining[1], remaining[0])
