"""HTTP middleware: request ids and request logging."""

from __future__ import annotations

import logging
import uuid
from typing import Mapping

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from .masking import mask_headers

logger = logging.getLogger("hookrelay")

REQUEST_ID_HEADER = "X-Request-ID"
INCOMING_ID_HEADERS = ("x-request-id", "x-correlation-id")


def resolve_request_id(headers: Mapping[str, str]) -> str:
    """Reuse an id set by a proxy or load balancer, else mint ``req-<uuid4>``."""
    for name in INCOMING_ID_HEADERS:
        value = headers.get(name)
        if value:
            return value
    return f"req-{uuid.uuid4()}"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id, echoes it back and logs the request line.

    With ``log_requests`` on, headers are logged too, with credentials masked.
    """

    def __init__(self, app, log_requests: bool = False) -> None:
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request.headers)
        request.state.request_id = request_id

        logger.info("[%s] %s %s", request_id, request.method, request.url.path)
        if self.log_requests:
            logger.info("[%s] Headers: %s", request_id, mask_headers(request.headers))
            if request.url.query:
                logger.info("[%s] Query: %s", request_id, request.url.query)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
