from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import FastAPI, Request, status, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
import logging

import redis.asyncio as redis

from gotrippin.core.config import settings
from gotrippin.services.utils import AuthHelpers

logger = logging.getLogger(__name__)

auth = AuthHelpers()


class HTTPErrorHandler(BaseHTTPMiddleware):
    def __init__(self, app: FastAPI) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next) -> Response | JSONResponse:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}: {e}")
            return JSONResponse(
                content={"detail": "Internal server error"},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )


class VerifyToken(BaseHTTPMiddleware):
    def __init__(self, app: FastAPI) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next) -> Response | JSONResponse:
        request.state.user = None

        if request.method == "OPTIONS":
            return await call_next(request)

        if not request.url.path.startswith(tuple(settings.PUBLIC_PATHS)):
            try:
                # may call Supabase Auth over the network
                request.state.user = await run_in_threadpool(auth.verify_request, request)
            except HTTPException as e:
                return JSONResponse({"detail": e.detail}, status_code=e.status_code)

        return await call_next(request)


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        url = request.url.path
        user_agent = request.headers.get("user-agent", "unknown")
        referer = request.headers.get("referer", "unknown")
        origin = request.headers.get("origin", "unknown")

        logger.info(
            f"Incoming request: ip={client_ip} method={method} path={url} "
            f"user_agent={user_agent} origin={origin} referer={referer}"
        )

        response = await call_next(request)

        logger.info(f"Response status: {response.status_code} for {method} {url}")

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window rate limiting backed by Redis.

    Each client IP, method and path gets its own counter. When Redis is not
    reachable the request is let through.
    """

    def __init__(
        self,
        app,
        redis_url: str = "redis://localhost:6379",
        default_limit: int = 100,
        default_window: int = 3600,
        redis_client: redis.Redis | None = None,
    ):
        super().__init__(app)
        self.redis_url = redis_url
        self.default_limit = default_limit
        self.default_window = default_window
        self._redis = redis_client

        self.route_limits = {
            "/auth/login": (5, 60),
            "/images/search": (60, 60),
            "/health": (1000, 60),
        }

    async def _get_redis(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    def _get_limit_for_path(self, path: str) -> tuple[int, int]:
        if path in self.route_limits:
            return self.route_limits[path]

        for route_pattern, limits in self.route_limits.items():
            if path.startswith(route_pattern.rstrip("/")):
                return limits

        return self.default_limit, self.default_window

    def _get_client_ip(self, request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path
        key = f"ratelimit:{self._get_client_ip(request)}:{request.method}:{path}"
        limit, window = self._get_limit_for_path(path)

        try:
            r = await self._get_redis()
            current = await r.incr(key)
            if current == 1:
                await r.expire(key, window)
            ttl = await r.ttl(key)
        except redis.RedisError as e:
            logger.warning(f"Redis unavailable for rate limiting, allowing request: {e}")
            return await call_next(request)

        if current > limit:
            return JSONResponse(
                {"detail": "Too many requests. Try again later.", "retry_after": ttl},
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers={"Retry-After": str(ttl)},
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit - current))
        response.headers["X-RateLimit-Reset"] = str(ttl)

        return response
