"""
HTTP middleware: request correlation and timing.
"""
from __future__ import annotations

import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from homestay.core.logging import get_logger, request_id, user_id

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Binds the request ID and calling user to the logging context.

    An upstream ``X-Request-ID`` is reused, otherwise one is generated. The
    ID is echoed back on the response along with the processing time.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        req_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = req_id
        req_token = request_id.set(req_id)
        user_token = user_id.set(request.headers.get("X-User-Id"))
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id.reset(req_token)
            user_id.reset(user_token)

        process_time = time.perf_counter() - start_time
        response.headers[self.header_name] = req_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        logger.info(
            "Request completed",
            extra={
                "request_id": req_id,
                "method": request.method,
                "url": request.url.path,
                "status_code": response.status_code,
                "process_time": f"{process_time:.4f}s",
            },
        )
        return response


def register_middlewares(app: FastAPI) -> None:
    app.add_middleware(RequestContextMiddleware)


__all__ = ["RequestContextMiddleware", "register_middlewares"]
