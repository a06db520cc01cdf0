"""Request-id propagation into the structlog context."""

import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from aicgs.logging_config import bind_request_context, clear_request_context

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        bind_request_context(request_id, method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
        finally:
            clear_request_context("request_id", "user_id", "method", "path")
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
