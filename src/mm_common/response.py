"""Response envelope shared by every endpoint, success or failure.

    {"code": 0, "message": "success", "data": {...},
     "timestamp": "...", "request_id": "req_..."}

``code`` is 0 on success and the AppError code otherwise; ``data`` is null on
error. ``request_id`` echoes the id RequestLogMiddleware put on request.state
so a client report can be matched to the server log line.
"""

import uuid
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.mm_common.datetime_utils import utc_now
from src.mm_common.errors import AppError


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=_new_request_id)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or _new_request_id()


def respond(request: Request, data: BaseModel | list[BaseModel] | None) -> ApiResponse:
    """Wrap a schema (or list of schemas) in a success envelope."""
    if isinstance(data, list):
        payload: Any = [item.model_dump(mode="json") for item in data]
    elif data is None:
        payload = None
    else:
        payload = data.model_dump(mode="json")
    return ApiResponse(data=payload, request_id=_request_id(request))


def error_envelope(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError with its own HTTP status and code."""
    body = ApiResponse(code=exc.code, message=exc.message, request_id=_request_id(request))
    return JSONResponse(status_code=exc.http_status, content=body.model_dump())
