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
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.sf_allocation.api.router import router as payment_router
from src.sf_common.database import engine
from src.sf_common.errors import AppError
from src.sf_common.redis_client import close_redis, get_redis
from src.sf_common.response import error_response
from src.sf_gateway.middleware.rate_limit import RateLimitMiddleware
from src.sf_gateway.middleware.request_log import RequestLogMiddleware
from src.sf_loan.api.router import expense_router
from src.sf_loan.api.router import router as loan_router
from src.sf_project.api.router import router as project_router
from src.sf_report.api.router import router as fund_router
from src.sf_wallet.api.router import router as wallet_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.DEBUG,
)


# Starlette runs the last-added middleware first: log, then rate-limit.
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        resp.request_id = request_id
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(project_router, prefix="/api/v1")
app.include_router(wallet_router, prefix="/api/v1")
app.include_router(payment_router, prefix="/api/v1")
app.include_router(expense_router, prefix="/api/v1")
app.include_router(loan_router, prefix="/api/v1")
app.include_router(fund_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
