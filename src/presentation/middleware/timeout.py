"""Request deadline middleware."""

import asyncio
import time
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware


class TimeoutMiddleware(BaseHTTPMiddleware):
    """
    Answer 504 when a request outlives its deadline.

    Blob store calls can stall on a slow object store; the deadline bounds
    how long an upload or download may hold a worker.
    """

    def __init__(self, app, timeout: float = 60.0):
        super().__init__(app)
        self.timeout = timeout

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()

        try:
            response = await asyncio.wait_for(call_next(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            return JSONResponse(
                status_code=504,
                content={
                    "detail": {
                        "error": "REQUEST_TIMEOUT",
                        "message": f"Request exceeded the {self.timeout:g}s deadline",
                        "details": {"path": request.url.path},
                    }
                },
            )

        response.headers["X-Process-Time"] = f"{time.perf_counter() - started:.4f}"
        return response
