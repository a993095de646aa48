"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.pf_account.api.router import router as account_router
from src.pf_common.database import engine
from src.pf_common.errors import AppError
from src.pf_common.redis_client import close_redis, get_redis
from src.pf_common.response import error_response
from src.pf_conflict.api.router import router as conflict_router
from src.pf_gateway.middleware.request_log import RequestLogMiddleware
from src.pf_import.api.router import router as import_router
from src.pf_portfolio.api.router import router as portfolio_router
from src.pf_portfolio.api.tools_router import router as tools_router
from src.pf_portfolio.infrastructure.price_client import YahooPriceProvider
from src.pf_trade.api.router import router as trade_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, open the price HTTP client. Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    price_http = httpx.AsyncClient(
        timeout=settings.PRICE_TIMEOUT_SECONDS,
        headers={"User-Agent": f"{settings.APP_NAME}/0.1"},
    )
    app.state.price_provider = YahooPriceProvider(price_http)
    yield
    # Shutdown
    await price_http.aclose()
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(account_router, prefix="/api/v1")
app.include_router(import_router, prefix="/api/v1")
app.include_router(conflict_router, prefix="/api/v1")
app.include_router(portfolio_router, prefix="/api/v1")
app.include_router(tools_router, prefix="/api/v1")
app.include_router(trade_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
