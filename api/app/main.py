# main.py

"""FastAPI application for the Ayoo delivery service.

Order, menu, account and voucher routes live in ``routes_*`` modules; this
module wires them together with the middleware stack, error handlers and the
Redis client used for real-time fan-out.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import from_url
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_settings

from .db import get_session, init_models
from .domain.errors import DeliveryError
from .middlewares import (
    LoggingMiddleware,
    PrometheusMiddleware,
    RequestIdMiddleware,
)
from .obs import capture_exception, configure_logging, init_sentry
from .routes_admin import router as admin_router
from .routes_auth import router as auth_router
from .routes_metrics import router as metrics_router
from .routes_orders import router as orders_router
from .routes_payments import router as payments_router
from .routes_restaurants import router as restaurants_router
from .routes_users import router as users_router
from .routes_vouchers import router as vouchers_router
from .routes_ws import router as ws_router
from .seed import seed_demo_data
from .utils.responses import err, error_response

settings = get_settings()
app = FastAPI(
    title="Ayoo Delivery API",
    version="1.0.0",
    servers=[{"url": "/"}],
    openapi_url="/openapi.json",
)

app.state.redis = from_url(settings.redis_url, decode_responses=True)
app.add_middleware(PrometheusMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

configure_logging(settings.log_level.upper())
logger = logging.getLogger("api")
init_sentry(env=os.getenv("ENV"))


@app.exception_handler(DeliveryError)
async def delivery_error_handler(request: Request, exc: DeliveryError):
    logger.info(
        exc.message,
        extra={"status": exc.status_code, "route": request.url.path},
    )
    return error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(
        exc.detail,
        extra={"status": exc.status_code, "route": request.url.path},
    )
    return JSONResponse(err(exc.status_code, exc.detail), status_code=exc.status_code)


@app.exception_handler(Exception)
async def general_error_handler(request: Request, exc: Exception):
    logger.exception(
        "unhandled_error",
        extra={"status": 500, "route": request.url.path},
    )
    capture_exception(exc)
    return JSONResponse(err(500, "Internal Server Error"), status_code=500)


@app.on_event("startup")
async def prepare_database() -> None:
    """Create missing tables and, when enabled, the demo rows."""

    await init_models()
    if get_settings().seed_demo_data:
        async with get_session() as session:
            await seed_demo_data(session)


@app.on_event("shutdown")
async def close_redis() -> None:
    await app.state.redis.aclose()


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(restaurants_router)
app.include_router(orders_router)
app.include_router(vouchers_router)
app.include_router(admin_router)
app.include_router(payments_router)
app.include_router(ws_router)
app.include_router(metrics_router)
