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
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from config.settings import settings
from src.smm_admin.api.router import router as admin_router
from src.smm_balance.api.router import router as balance_router
from src.smm_catalog.api.router import router as catalog_router
from src.smm_common.database import engine, ping_database
from src.smm_common.errors import REQUEST_VALIDATION_CODE, AppError
from src.smm_common.redis_client import close_redis, redis_available
from src.smm_common.response import error_response
from src.smm_gateway.api.router import router as auth_router
from src.smm_gateway.middleware.rate_limit import RateLimitMiddleware
from src.smm_gateway.middleware.request_log import RequestLogMiddleware
from src.smm_ledger.api.router import router as account_router
from src.smm_order.api.router import router as order_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    # Startup
    await ping_database()
    if settings.RATE_LIMIT_ENABLED and not await redis_available():
        logger.warning("Redis unreachable at startup; rate limiting will fail open")
    logger.info("%s started", settings.APP_NAME)
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# Starlette runs the last-added middleware first: request logging wraps rate limiting.
if settings.RATE_LIMIT_ENABLED:
    app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


def _request_id(request: Request, default: str) -> str:
    return getattr(request.state, "request_id", default)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = _request_id(request, resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    resp = error_response(
        REQUEST_VALIDATION_CODE,
        "Request validation failed",
        data={"errors": jsonable_encoder(exc.errors())},
    )
    resp.request_id = _request_id(request, resp.request_id)
    return JSONResponse(status_code=422, content=resp.model_dump())


app.include_router(auth_router, prefix="/api/v1")
app.include_router(account_router, prefix="/api/v1")
app.include_router(balance_router, prefix="/api/v1")
app.include_router(catalog_router, prefix="/api/v1")
app.include_router(order_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, object]:
    """Liveness only: never touches PostgreSQL."""
    redis_ok = await redis_available() if settings.RATE_LIMIT_ENABLED else None
    return {"status": "ok", "version": "0.1.0", "rate_limiter": redis_ok}
