# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-request logging context middleware.

Every request starts with an empty structlog context holding only its
request id and path. Route handlers add the session and participant ids
with bind_context(). The context is cleared again once the response is
produced.

Example:
    GET /api/v1/games/abc
    X-Request-ID: 5f0c...

    {"event": "Processing move: ...", "request_id": "5f0c...", "session_id": "abc"}
"""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from chatplay.utils.logging import bind_context, clear_context

# Header used to pass a caller's request id through, and to return ours
REQUEST_ID_HEADER = "X-Request-ID"


class LogContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id to every log line of a request."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        """Reset the log context, run the request, then reset it again.

        Args:
            request: Incoming request.
            call_next: Next handler in the chain.

        Returns:
            The response, carrying the request id header.
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        clear_context()
        bind_context(request_id=request_id, path=request.url.path)
        try:
            response = await call_next(request)
        finally:
            clear_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
