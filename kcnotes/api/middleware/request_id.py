"""
Per-request correlation id.

A caller-supplied ``X-Request-ID`` is reused when it looks sane, otherwise
a fresh uuid4 is minted. The id is echoed on the response, kept on
``request.state`` for the error handlers and bound to the logging context.
"""

import re
import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from kcnotes.logging_config import get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Incoming ids end up in log lines and response headers
_ACCEPTED_REQUEST_ID = re.compile(r"[A-Za-z0-9._\-]{1,64}")

# bcrypt dominates signup/signin latency, so only flag clearly slow requests
SLOW_REQUEST_MS = 2000


def resolve_request_id(header_value: Optional[str]) -> str:
    if header_value and _ACCEPTED_REQUEST_ID.fullmatch(header_value):
        return header_value
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        context_token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
            request_id_var.reset(context_token)

        response.headers[REQUEST_ID_HEADER] = request_id
        if elapsed_ms > SLOW_REQUEST_MS:
            logger.warning(
                "Slow request %s %s took %sms",
                request.method,
                request.url.path,
                elapsed_ms,
            )
        return response
