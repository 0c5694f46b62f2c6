"""
Venue Directory Backend: Request ID Middleware
================================================

What:  Gives every request a correlation ID, echoed as X-Request-ID and
       carried in every error body.
How:   A client-supplied X-Request-ID is reused only when it is 1-64
       characters of [A-Za-z0-9._-]; anything else (it ends up in log lines
       verbatim) is replaced by a fresh 8-character ID. The ID lives in a
       ContextVar for loggers and exception handlers, and on
       request.state.request_id.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

HEADER = "X-Request-ID"
ACCEPTED_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(supplied: Optional[str]) -> str:
    if supplied and ACCEPTED_ID.match(supplied):
        return supplied
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(HEADER))
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[HEADER] = rid
        return response
