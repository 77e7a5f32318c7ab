"""Request correlation ids.

A request id looks like ``host.example.com/AbCdEf0123-000042``: the host name,
a random base62 string that identifies this process, and a per-process
request counter. A client-supplied ``X-Request-Id`` header wins over a
generated id.

With a 10 character base62 prefix the chance of two processes colliding is
negligible even for a service restarted every second for a decade, which
makes the id unique enough for log correlation.
"""

import itertools
import secrets
import socket
import string
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from archivist.core.logging import request_id_context

REQUEST_ID_HEADER = "X-Request-Id"

_BASE62 = string.ascii_letters + string.digits


def _process_prefix() -> str:
    hostname = socket.gethostname() or "localhost"
    random_part = "".join(secrets.choice(_BASE62) for _ in range(10))
    return f"{hostname}/{random_part}"


_prefix = _process_prefix()
_counter = itertools.count(1)


def new_request_id() -> str:
    """Generate the next request id for this process."""
    return f"{_prefix}-{next(_counter):06d}"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind a request id to the request context and echo it on the response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        token = request_id_context.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_context.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
