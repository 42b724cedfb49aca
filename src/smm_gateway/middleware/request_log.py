"""Access log for every HTTP request.

Assigns request.state.request_id (reusing a sane inbound X-Request-ID so
traces from a reverse proxy line up), echoes it back as a response header
and logs one line per request on the "smm.request" logger. 5xx responses
log at ERROR, 4xx at WARNING.

    INFO [POST] /api/v1/orders → 201 (23ms) req_a1b2c3d4e5f6 ip=203.0.113.7
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.smm_gateway.middleware.rate_limit import client_ip

logger = logging.getLogger("smm.request")

_INBOUND_ID = re.compile(r"^[A-Za-z0-9_\-]{8,64}$")


def _request_id(request: Request) -> str:
    inbound = request.headers.get("x-request-id", "")
    if _INBOUND_ID.match(inbound):
        return inbound
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = _request_id(request)

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s ip=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
            client_ip(request),
        )
        response.headers["X-Request-ID"] = request.state.request_id
        return response
