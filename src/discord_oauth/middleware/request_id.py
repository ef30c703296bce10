from __future__ import annotations

import logging
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags each request with an ID, logs it, and echoes the ID on the response."""

    def __init__(self, app, header_name: str = "X-Request-ID", logger_name: str = "discord_oauth.access"):
        super().__init__(app)
        self.header_name = header_name
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(self.header_name) or uuid.uuid4().hex
        request.state.request_id = request_id
        response = await call_next(request)
        # Query strings are left out: /callback carries the authorization code
        self.logger.info(
            "%s %s -> %s",
            request.method,
            request.url.path,
            response.status_code,
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
            },
        )
        response.headers[self.header_name] = request_id
        return response
