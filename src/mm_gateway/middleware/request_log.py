"""Per-request id and access log line.

A client-supplied X-Request-ID (e.g. from a reverse proxy) is reused when it
looks sane, otherwise a fresh ``req_<12 hex>`` id is minted. The id lands on
request.state for the response envelope and is echoed back as a header.

    INFO  [PUT] /api/v1/messes/<id>/meals → 200 (12ms) req_a1b2c3d4e5f6
    WARN  [POST] /api/v1/messes/<id>/cycles/<id>/close → 409 (31ms) req_...
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("mm.request")

REQUEST_ID_HEADER = "X-Request-ID"
_SAFE_ID = re.compile(r"^[A-Za-z0-9_\-]{8,64}$")


def _request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "")
    if _SAFE_ID.match(incoming):
        return incoming
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _request_id(request)
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        # 4xx are business refusals (locked meal, closed cycle); only 5xx is noisy.
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
