"""GraphQL query and mutation executor over HTTP."""

import json
import logging

import httpx

from chainpost.models.request import BaseRequest, GraphQLOperationType, GraphQLRequest, RequestType
from chainpost.models.response import RequestResponse
from chainpost.services.execution.executors.base import RequestExecutor
from chainpost.services.execution.executors.common import (
    APPLICATION_JSON,
    CONTENT_TYPE,
    ResponseRecorder,
    build_headers,
    build_http_request,
    capture_request_headers,
    graphql_payload,
    set_header,
)

logger = logging.getLogger(__name__)


class GraphQLRequestExecutor(RequestExecutor):
    """POSTs {query, variables, operationName} as JSON to the GraphQL endpoint."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    def can_execute(self, request: BaseRequest) -> bool:
        return (
            request.type == RequestType.GRAPHQL.value
            and request.operation_type != GraphQLOperationType.SUBSCRIPTION
        )

    async def execute(self, request: BaseRequest) -> RequestResponse:
        if not isinstance(request, GraphQLRequest):
            raise TypeError("Request must be a GraphQLRequest")

        recorder = ResponseRecorder()
        try:
            body = json.dumps(graphql_payload(request))
            headers = build_headers(request)
            set_header(headers, CONTENT_TYPE, APPLICATION_JSON)

            http_request = build_http_request(
                self.client, "POST", request.url, headers, content=body.encode("utf-8")
            )
            recorder.sent(
                url=str(http_request.url),
                method="POST",
                headers=capture_request_headers(http_request),
                body=body,
            )

            http_response = await self.client.send(http_request)
            recorder.stop_timing()
            recorder.with_http_response(http_response)
            recorder.with_body(http_response.text)
        except Exception as e:
            logger.warning("GraphQL request to %s failed: %s", request.url, e)
            recorder.with_exception(e)

        return recorder.build()
