"""Middleware for HTTP access logging."""

import logging
import time
from typing import AsyncIterator, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per completed request.

    The line is written once the response body has been sent, so
    ``response_length`` is the number of bytes actually written, streamed
    responses included.

    - < 400 responses: logged at INFO level
    - 4xx responses: logged at WARN level
    - 5xx responses: logged at ERROR level
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log its outcome.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            HTTP response
        """
        start_time = time.monotonic()

        response = await call_next(request)
        response.body_iterator = self._counted(response.body_iterator, request, response.status_code, start_time)
        return response

    async def _counted(
        self, body_iterator: AsyncIterator[bytes], request: Request, status_code: int, start_time: float
    ) -> AsyncIterator[bytes]:
        written = 0
        try:
            async for chunk in body_iterator:
                written += len(chunk)
                yield chunk
        finally:
            self._log(request, status_code, start_time, written)

    @staticmethod
    def _log(request: Request, status_code: int, start_time: float, written: int) -> None:
        duration_ms = (time.monotonic() - start_time) * 1000
        fields = {
            "http_method": request.method,
            "http_resource": request.url.path,
            "http_status": status_code,
            "request_duration_ms": round(duration_ms, 3),
            "response_length": written,
        }

        if status_code >= 500:
            logger.error("Request completed", extra=fields)
        elif status_code >= 400:
            logger.warning("Request completed", extra=fields)
        else:
            logger.info("Request completed", extra=fields)
