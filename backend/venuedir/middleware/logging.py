"""
Venue Directory Backend: Access Log Middleware
================================================

What:  One access-log line per HTTP request, attributed to the caller.
How:   Times the downstream app, then reads the Identity that
       require_identity stored on request.state (if any) and classifies
       the outcome:

           ok             2xx / 3xx
           auth_rejected  401 / 403 (no token, bad token, bad password)
           client_error   other 4xx
           server_error   5xx

       Level follows the outcome: server_error ERROR, auth_rejected and
       client_error WARNING, ok INFO.

Never logged: request bodies (passwords), Authorization headers (tokens).
/health is skipped to keep probe traffic out of the log.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from venuedir.middleware.request_id import request_id_var

logger = logging.getLogger("venuedir.access")

SKIPPED_PATHS = {"/health"}

OUTCOME_LEVELS = {
    "ok": logging.INFO,
    "auth_rejected": logging.WARNING,
    "client_error": logging.WARNING,
    "server_error": logging.ERROR,
}


def classify(status: int) -> str:
    if status >= 500:
        return "server_error"
    if status in (401, 403):
        return "auth_rejected"
    if status >= 400:
        return "client_error"
    return "ok"


def caller_id(request: Request) -> Optional[int]:
    identity = getattr(request.state, "identity", None)
    return identity.id if identity is not None else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        outcome = classify(response.status_code)
        user_id = caller_id(request)
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        logger.log(
            OUTCOME_LEVELS[outcome],
            "%s %s %d %s user=%s %.1fms [%s] from %s",
            request.method,
            request.url.path,
            response.status_code,
            outcome,
            user_id if user_id is not None else "-",
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "user_id": user_id,
                "outcome": outcome,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
