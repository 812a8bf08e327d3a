"""REST request executor over httpx."""

import asyncio
import logging
from pathlib import Path
from typing import Any

import httpx

from chainpost.models.request import BaseRequest, BodyType, RequestType, RestRequest
from chainpost.models.response import RequestResponse
from chainpost.services.execution.executors.base import RequestExecutor
from chainpost.services.execution.executors.common import (
    APPLICATION_OCTET_STREAM,
    CONTENT_TYPE,
    ResponseRecorder,
    build_headers,
    build_http_request,
    capture_request_headers,
    drop_header,
    rest_content_type,
    set_header,
)

logger = logging.getLogger(__name__)


class RestRequestExecutor(RequestExecutor):
    """Sends REST requests with auth, enabled headers and enabled query parameters."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    def can_execute(self, request: BaseRequest) -> bool:
        return request.type == RequestType.REST.value

    async def execute(self, request: BaseRequest) -> RequestResponse:
        if not isinstance(request, RestRequest):
            raise TypeError("Request must be a RestRequest")

        recorder = ResponseRecorder()
        try:
            http_request = await self._build_request(request)
            recorder.sent(
                url=str(http_request.url),
                method=request.method.value,
                headers=capture_request_headers(http_request),
                body=request.body,
                query_parameters=request.enabled_query_parameters(),
            )

            http_response = await self.client.send(http_request)
            recorder.stop_timing()
            recorder.with_http_response(http_response)
            recorder.with_body(http_response.text)
        except httpx.TimeoutException as e:
            logger.warning("REST request to %s timed out: %s", request.url, e)
            recorder.with_exception(e)
        except Exception as e:
            logger.warning("REST request to %s failed: %s", request.url, e)
            recorder.with_exception(e)

        return recorder.build()

    async def _build_request(self, request: RestRequest) -> httpx.Request:
        headers = build_headers(request)
        kwargs: dict[str, Any] = {}

        params = request.enabled_query_parameters()
        if params:
            kwargs["params"] = params

        if request.body_type == BodyType.FORM_DATA:
            parts = await self._multipart_parts(request)
            if parts:
                # httpx sets the multipart boundary itself
                drop_header(headers, CONTENT_TYPE)
                kwargs["files"] = parts
        elif request.body:
            kwargs["content"] = request.body.encode("utf-8")
            drop_header(headers, CONTENT_TYPE)
            if CONTENT_TYPE not in request.disabled_headers:
                set_header(headers, CONTENT_TYPE, rest_content_type(request))

        return build_http_request(self.client, request.method.value, request.url, headers, **kwargs)

    @staticmethod
    async def _multipart_parts(request: RestRequest) -> list[tuple[str, tuple]]:
        """Enabled, non-blank fields and files as multipart parts. Files are read off the event loop."""
        parts: list[tuple[str, tuple]] = []
        for form_field in request.form_data_fields:
            if form_field.enabled and form_field.key.strip():
                parts.append((form_field.key, (None, form_field.value.encode("utf-8"))))

        for form_file in request.form_data_files:
            if not form_file.enabled or not form_file.key.strip() or not form_file.file_path:
                continue
            path = Path(form_file.file_path)
            if not path.is_file():
                logger.warning("Skipping form file %s: %s does not exist", form_file.key, path)
                continue
            content = await asyncio.to_thread(path.read_bytes)
            parts.append((
                form_file.key,
                (path.name, content, form_file.content_type or APPLICATION_OCTET_STREAM),
            ))
        return parts
