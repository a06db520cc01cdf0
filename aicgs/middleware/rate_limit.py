"""Redis-based sliding window rate limiting middleware."""

import time

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from aicgs.logging_config import get_logger

logger = get_logger(__name__)

SKIP_PATHS = {"/health", "/api/health", "/docs", "/redoc", "/openapi.json"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis sliding window rate limiter (ZADD + ZREMRANGEBYSCORE)."""

    def __init__(self, app, redis_getter, limit: int = 60, window: int = 60):
        super().__init__(app)
        self._redis_getter = redis_getter
        self._limit = limit
        self._window = window

    def _identify(self, request: Request) -> str:
        # Token tail is unique per issued JWT; the header segment is shared by all
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer ") and len(auth_header) > 23:
            return f"tok:{auth_header[-16:]}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in SKIP_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        identifier = self._identify(request)
        key = f"ratelimit:{identifier}:{request.url.path}"

        try:
            redis = self._redis_getter()
            now = time.time()

            pipe = redis.pipeline()
            pipe.zremrangebyscore(key, 0, now - self._window)
            pipe.zadd(key, {str(now): now})
            pipe.zcard(key)
            pipe.expire(key, self._window + 1)
            results = await pipe.execute()
            request_count = results[2]
        except Exception as e:
            # Redis down: let the request through
            logger.warning("rate_limit_redis_error", error=str(e))
            return await call_next(request)

        if request_count > self._limit:
            logger.warning(
                "rate_limit_exceeded",
                identifier=identifier,
                path=request.url.path,
                count=request_count,
                limit=self._limit,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "detail": f"Rate limit exceeded: {self._limit} requests per {self._window}s",
                },
                headers={"Retry-After": str(self._window)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self._limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self._limit - request_count))
        return response
