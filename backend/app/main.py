from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.exceptions import http_exception_handler, validation_exception_handler
from app.core.security import SecurityMiddleware
from app.core.https_middleware import HTTPSMiddleware
from app.core.logging_config import setup_logging
from app.core.security_headers import SecurityHeadersMiddleware
from app.api.v1 import health
from app.api.v1.girls import router as girls_router
from app.services.rate_limiter import RateLimiter
from app.services.reaper import RateLimitReaper
from app.services.request_log import request_log_recorder


setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    reaper = RateLimitReaper(
        app.state.rate_limiter,
        interval_seconds=settings.RATE_LIMIT_REAPER_INTERVAL_SECONDS,
    )
    if settings.RATE_LIMIT_REAPER_ENABLED:
        reaper.start()
    app.state.reaper = reaper

    try:
        yield
    finally:
        reaper.stop()


app = FastAPI(
    title=settings.APP_NAME,
    description="Read-only partner API for the CBODY booking platform. "
                "API-key authenticated, with per-key and per-IP "
                "fixed-window rate limits.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Counters are per process; each worker enforces its own quota
app.state.rate_limiter = RateLimiter(
    origin_max_requests=settings.IP_RATE_LIMIT_PER_HOUR,
)
app.state.request_log_recorder = request_log_recorder

app.add_middleware(SecurityMiddleware)
app.add_middleware(HTTPSMiddleware)
app.add_middleware(SecurityHeadersMiddleware)


# ─────────────────────────────────────────────
# Root route
# ─────────────────────────────────────────────
@app.get("/", tags=["root"])
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "health": f"{settings.API_V1_PREFIX}/health",
        "endpoints": {
            "girls": f"{settings.API_V1_PREFIX}/girls",
        },
    }


# ─────────────────────────────────────────────
# Exception handlers
# ─────────────────────────────────────────────
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)


# ─────────────────────────────────────────────
# API v1 routes
# ─────────────────────────────────────────────
app.include_router(health.router, prefix=settings.API_V1_PREFIX, tags=["health"])
app.include_router(girls_router, prefix=settings.API_V1_PREFIX, tags=["girls"])
