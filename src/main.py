"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.mm_approval.api.router import router as approval_router
from src.mm_balance.api.router import router as balance_router
from src.mm_common.database import engine
from src.mm_common.errors import AppError, InternalError, InvalidInputError
from src.mm_common.response import error_envelope
from src.mm_cycle.api.router import router as cycle_router
from src.mm_gateway.middleware.request_log import RequestLogMiddleware
from src.mm_ledger.api.router import router as ledger_router
from src.mm_meal.api.router import router as meal_router
from src.mm_mess.api.router import router as mess_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the DB connection. Shutdown: dispose the pool."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return error_envelope(request, exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = f"{field}: {first.get('msg', 'invalid request')}" if field else "invalid request"
    return error_envelope(request, InvalidInputError(detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_envelope(request, InternalError())


app.include_router(mess_router, prefix="/api/v1")
app.include_router(meal_router, prefix="/api/v1")
app.include_router(ledger_router, prefix="/api/v1")
app.include_router(approval_router, prefix="/api/v1")
app.include_router(balance_router, prefix="/api/v1")
app.include_router(cycle_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
