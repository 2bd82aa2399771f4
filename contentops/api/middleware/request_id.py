"""
Correlation ids.

A caller-supplied X-Request-ID is reused, otherwise one is minted. The id is
echoed on the response and bound to the logging context; the actor slot starts
empty and is filled by get_current_user.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from contentops.logging_config import actor_id_var, get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_SECONDS = 1.0


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        tokens = (request_id_var.set(request_id), actor_id_var.set(None))

        started = time.monotonic()
        try:
            response = await call_next(request)
            elapsed = time.monotonic() - started
            if elapsed > SLOW_REQUEST_SECONDS:
                logger.warning(
                    "Slow request %s %s took %.0f ms",
                    request.method,
                    request.url.path,
                    elapsed * 1000,
                )
        finally:
            actor_id_var.reset(tokens[1])
            request_id_var.reset(tokens[0])

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
