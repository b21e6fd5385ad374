"""Per-request middleware: request ids, log context and access logging."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from nextstep.core.context import log_context, request_id_ctx_var, user_id_ctx_var

REQUEST_ID_HEADER = "X-Request-Id"

access_logger = logging.getLogger("nextstep.access")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind a request id and the acting user to the log context for one request.

    The id comes from the caller's ``X-Request-Id`` header when present and is
    echoed back on the response. ``user_id`` is read from the query string,
    which is where every storage-backed route takes it.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        request_token = request_id_ctx_var.set(request_id)
        user_token = user_id_ctx_var.set(request.query_params.get("user_id"))
        started = perf_counter()

        try:
            response = await call_next(request)
            access_logger.info(
                "%s %s -> %s in %.1fms",
                request.method,
                request.url.path,
                response.status_code,
                (perf_counter() - started) * 1000,
                extra=log_context(),
            )
        finally:
            user_id_ctx_var.reset(user_token)
            request_id_ctx_var.reset(request_token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
