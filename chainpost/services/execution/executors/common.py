"""Helpers shared by the protocol executors."""

import base64
import json
import time
import traceback
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import httpx

from chainpost.config import get_settings
from chainpost.models.request import AuthenticationType, BaseRequest, BodyType, GraphQLRequest, RestRequest
from chainpost.models.response import RequestResponse, SentRequest, StreamEvent

# Header names
AUTHORIZATION = "Authorization"
CONTENT_TYPE = "Content-Type"
ACCEPT = "Accept"
USER_AGENT = "User-Agent"

# Media types
APPLICATION_JSON = "application/json"
APPLICATION_XML = "application/xml"
TEXT_PLAIN = "text/plain"
TEXT_HTML = "text/html"
APPLICATION_JAVASCRIPT = "application/javascript"
APPLICATION_OCTET_STREAM = "application/octet-stream"
TEXT_EVENT_STREAM = "text/event-stream"

BODY_TYPE_MEDIA_TYPES = {
    BodyType.JSON: APPLICATION_JSON,
    BodyType.XML: APPLICATION_XML,
    BodyType.HTML: TEXT_HTML,
    BodyType.JAVASCRIPT: APPLICATION_JAVASCRIPT,
    BodyType.TEXT: TEXT_PLAIN,
}

BASIC_SCHEME = "Basic"
BEARER_SCHEME = "Bearer"

STREAM_TIME_FORMAT = "%H:%M:%S"


def authorization_value(request: BaseRequest) -> str | None:
    """Build the Authorization header value for the request's auth settings, if any."""
    if request.auth_type == AuthenticationType.BASIC and request.basic_auth_username:
        credentials = f"{request.basic_auth_username}:{request.basic_auth_password or ''}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        return f"{BASIC_SCHEME} {encoded}"
    if request.auth_type == AuthenticationType.BEARER_TOKEN and request.bearer_token:
        return f"{BEARER_SCHEME} {request.bearer_token}"
    return None


def should_skip_header(name: str, request: BaseRequest) -> bool:
    """User-supplied Authorization headers give way to configured authentication."""
    return request.auth_type != AuthenticationType.NONE and name.lower() == AUTHORIZATION.lower()


def build_headers(request: BaseRequest, include_user_agent: bool = True) -> dict[str, str]:
    """
    Assemble outgoing headers for a request.

    Order of application:
    1. Default User-Agent (unless the User-Agent header is disabled)
    2. Authentication
    3. Enabled user headers, replacing earlier values of the same name

    Args:
        request: Resolved request
        include_user_agent: Whether to add the default User-Agent

    Returns:
        Header map ready to send
    """
    headers: dict[str, str] = {}
    if include_user_agent and USER_AGENT not in request.disabled_headers:
        headers[USER_AGENT] = get_settings().user_agent

    auth = authorization_value(request)
    if auth is not None:
        headers[AUTHORIZATION] = auth

    for name, value in request.enabled_headers().items():
        if should_skip_header(name, request):
            continue
        set_header(headers, name, value)

    return headers


def drop_header(headers: dict[str, str], name: str) -> None:
    for existing in [k for k in headers if k.lower() == name.lower()]:
        del headers[existing]


def pop_header(headers: dict[str, str], name: str) -> str | None:
    """Remove a header regardless of case and return its value."""
    value = None
    for existing in [k for k in headers if k.lower() == name.lower()]:
        value = headers.pop(existing)
    return value


def set_header(headers: dict[str, str], name: str, value: str) -> None:
    """Set a header, replacing any existing value regardless of case."""
    drop_header(headers, name)
    headers[name] = value


def rest_content_type(request: RestRequest) -> str:
    """Explicit content type wins, otherwise infer from the body type."""
    if request.content_type:
        return request.content_type
    return BODY_TYPE_MEDIA_TYPES.get(request.body_type, TEXT_PLAIN)


def graphql_payload(request: GraphQLRequest) -> dict[str, Any]:
    """Standard GraphQL-over-HTTP payload: query, parsed variables and operation name."""
    return {
        "query": request.query,
        "variables": json.loads(request.variables) if request.variables else None,
        "operationName": request.operation_name,
    }


def capture_headers(headers: httpx.Headers) -> dict[str, str]:
    """Flatten headers, joining repeated values with a comma."""
    captured: dict[str, str] = {}
    for name in headers.keys():
        captured[name] = ", ".join(headers.get_list(name))
    return captured


def build_http_request(client: httpx.AsyncClient, method: str, url: str, headers: dict[str, str], **kwargs: Any) -> httpx.Request:
    """Build an httpx request whose User-Agent is exactly what the request asked for."""
    http_request = client.build_request(method, url, headers=headers, **kwargs)
    if not any(name.lower() == USER_AGENT.lower() for name in headers):
        # Drop the client default User-Agent
        http_request.headers.pop(USER_AGENT, None)
    return http_request


def capture_request_headers(http_request: httpx.Request) -> dict[str, str]:
    """Headers as transmitted, with their original casing."""
    encoding = http_request.headers.encoding
    return {name.decode(encoding): value.decode(encoding) for name, value in http_request.headers.raw}


def to_websocket_url(url: str) -> str:
    """Convert http(s) URLs to ws(s); bare hosts default to wss."""
    parts = urlsplit(url)
    if parts.scheme in ("ws", "wss"):
        return url
    if parts.scheme == "http":
        return urlunsplit(parts._replace(scheme="ws"))
    if parts.scheme == "https":
        return urlunsplit(parts._replace(scheme="wss"))
    return f"wss://{url}"


def message_text(raw: str | bytes) -> str:
    """Text of a WebSocket frame; binary frames are decoded as UTF-8."""
    return raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw


def format_stream_body(events: list[StreamEvent]) -> str:
    """Render stream events as one "[HH:MM:SS.fff] type: data" line each."""
    lines = []
    for event in events:
        stamp = f"{event.timestamp.strftime(STREAM_TIME_FORMAT)}.{event.timestamp.microsecond // 1000:03d}"
        lines.append(f"[{stamp}] {event.event_type}: {event.data}\n")
    return "".join(lines)


class ResponseRecorder:
    """Accumulates a RequestResponse while an executor runs, with timing."""

    def __init__(self, streaming: bool = False):
        self.response = RequestResponse(is_streaming=streaming)
        self._start = time.perf_counter()
        self._stopped = False

    @property
    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self._start) * 1000)

    def stop_timing(self) -> None:
        if not self._stopped:
            self.response.response_time_ms = self.elapsed_ms
            self._stopped = True

    def sent(self, url: str, method: str, headers: dict[str, str], body: str | None = None,
             query_parameters: dict[str, str] | None = None) -> None:
        self.response.sent_request = SentRequest(
            url=url,
            method=method,
            headers=dict(headers),
            body=body,
            query_parameters=dict(query_parameters or {}),
        )

    def with_http_response(self, http_response: httpx.Response) -> None:
        self.response.status_code = http_response.status_code
        self.response.status_message = http_response.reason_phrase or ""
        self.response.headers = capture_headers(http_response.headers)

    def with_body(self, body: str) -> None:
        self.response.body = body
        self.response.size = len(body)

    def event(self, data: str, event_type: str | None = None) -> None:
        self.response.add_stream_event(data, event_type)

    def finalize_streaming(self) -> None:
        self.with_body(format_stream_body(self.response.stream_events))

    def with_exception(self, error: BaseException) -> None:
        """Record a failure: status 0, "Error: <message>" and the exception text as body."""
        self.stop_timing()
        self.response.status_code = 0
        self.response.status_message = f"Error: {error}"
        self.response.body = "".join(traceback.format_exception_only(type(error), error)).strip()
        self.response.size = len(self.response.body)

    def build(self) -> RequestResponse:
        return self.response
