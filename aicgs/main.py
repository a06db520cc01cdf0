"""AICGS FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aicgs.config import get_settings
from aicgs.database import close_db, init_db
from aicgs.exceptions import InvalidTraitError, VotingError
from aicgs.logging_config import configure_logging, get_logger
from aicgs.middleware.rate_limit import RateLimitMiddleware
from aicgs.middleware.request_context import RequestContextMiddleware
from aicgs.redis import close_redis, get_redis, init_redis
from aicgs.routes.activities import router as activities_router
from aicgs.routes.agents import router as agents_router
from aicgs.routes.auth import router as auth_router
from aicgs.routes.monitoring import router as monitoring_router
from aicgs.routes.votes import router as votes_router

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: init DB + Redis on startup, cleanup on shutdown."""
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_json,
        service_name=settings.service_name,
    )
    logger.info("service_starting", version=settings.service_version)

    await init_db()
    await init_redis(settings.redis_url)

    logger.info("application_started")
    yield

    logger.info("shutting_down")
    await close_redis()
    await close_db()
    logger.info("shutdown_complete")


app = FastAPI(
    title="AICGS",
    description="Community governance for AI agents — trait-weighted voting on agent proposals",
    version=settings.service_version,
    lifespan=lifespan,
)

# Starlette runs the last-added middleware first
app.add_middleware(
    RateLimitMiddleware,
    redis_getter=get_redis,
    limit=settings.rate_limit_requests,
    window=settings.rate_limit_window_seconds,
)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)


@app.exception_handler(VotingError)
async def voting_error_handler(request: Request, exc: VotingError):
    content = {"error": exc.error_type, "detail": exc.message}
    if isinstance(exc, InvalidTraitError):
        content["invalid_traits"] = exc.invalid_traits
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_exception",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": str(exc) if settings.debug else "Something went wrong",
        },
    )


app.include_router(monitoring_router)
app.include_router(auth_router)
app.include_router(agents_router)
app.include_router(votes_router)
app.include_router(activities_router)
