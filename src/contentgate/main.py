"""FastAPI application factory for the content gateway.

This module creates and configures the FastAPI application with:
- Lifespan management (cache connection, origin client, services)
- Middleware configuration (CORS, request ID, logging, rate limiting)
- Exception handlers
- API routers
"""

import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from contentgate.config import Settings, get_settings
from contentgate.core.exceptions import GatewayError, RateLimitExceededError
from contentgate.core.logging import (
    clear_correlation_id,
    configure_logging,
    get_logger,
    set_correlation_id,
)
from contentgate.core.ratelimit import FixedWindowRateLimiter
from contentgate.dependencies import SettingsDep, get_health_aggregator
from contentgate.schemas.common import HealthCheckResponse, LivenessResponse
from contentgate.services.analytics import AnalyticsService
from contentgate.services.cache import CacheStore
from contentgate.services.content import ContentService
from contentgate.services.health import HealthAggregator
from contentgate.services.origin import OriginClient

logger = get_logger(__name__)

ANALYTICS_PATH_PREFIX = "/api/v1/analytics"
UNLIMITED_PATH_PREFIXES = ("/health",)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan events.

    Startup connects Redis once (falling back to cache bypass for the whole
    process lifetime if that fails) and builds the shared services. Shutdown
    runs after the server has stopped taking requests, so the Redis
    connection is never closed under an in-flight read.
    """
    settings: Settings = app.state.settings

    # ========================================
    # Startup
    # ========================================
    configure_logging(settings)
    startup_logger = get_logger(__name__)

    cache = await CacheStore.connect(settings)
    origin = OriginClient(settings)
    analytics = AnalyticsService.from_settings(settings)

    app.state.content_service = ContentService(cache, origin)
    app.state.health_aggregator = HealthAggregator(cache, origin)
    app.state.analytics_service = analytics

    startup_logger.info(
        "Application starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.app_env.value,
        origin=settings.strapi_url,
        cache_enabled=not cache.is_bypassed,
    )

    yield

    # ========================================
    # Shutdown
    # ========================================
    await analytics.close()
    await origin.close()
    await cache.close()

    startup_logger.info("Application shutting down", app_name=settings.app_name)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing

    Returns:
        FastAPI: Configured application instance
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Caching read-through gateway in front of the Strapi content API. "
            "Serves content, pages and previews to web and mobile clients."
        ),
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    configure_middleware(app, settings)
    configure_exception_handlers(app)
    configure_routes(app)

    return app


def _client_ip(request: Request) -> str:
    """Best-effort client address, honouring proxy headers."""
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure application middleware.

    Registration order matters: the last middleware added runs first.

    Args:
        app: The FastAPI application instance
        settings: Application settings
    """
    global_limiter = FixedWindowRateLimiter(
        limit=settings.rate_limit_requests,
        window=settings.rate_limit_window,
    )
    analytics_limiter = FixedWindowRateLimiter(
        limit=settings.analytics_rate_limit_requests,
        window=60,
    )
    app.state.rate_limiters = (global_limiter, analytics_limiter)

    @app.middleware("http")
    async def rate_limit_middleware(request: Request, call_next: Any) -> Any:
        """Reject clients that exceed their request budget with a 429."""
        path = request.url.path
        if request.method == "OPTIONS" or path.startswith(UNLIMITED_PATH_PREFIXES):
            return await call_next(request)

        client_ip = _client_ip(request)
        limiters = [global_limiter]
        if path.startswith(ANALYTICS_PATH_PREFIX):
            limiters.append(analytics_limiter)

        for limiter in limiters:
            allowed, retry_after = limiter.hit(client_ip)
            if not allowed:
                error = RateLimitExceededError(
                    retry_after=retry_after, limit=limiter.limit
                )
                logger.warning(
                    "Rate limit exceeded",
                    client_ip=client_ip,
                    path=path,
                    limit=limiter.limit,
                )
                return JSONResponse(
                    status_code=error.status_code,
                    content=error.to_dict(
                        request_id=getattr(request.state, "request_id", None)
                    ),
                    headers={"Retry-After": str(retry_after)},
                )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(global_limiter.limit)
        response.headers["X-RateLimit-Remaining"] = str(
            global_limiter.remaining(client_ip)
        )
        return response

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next: Any) -> Any:
        """Log requests and responses with correlation ID."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        set_correlation_id(request_id)

        request_logger = get_logger("contentgate.request")
        start_time = time.perf_counter()

        request_logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            query=str(request.query_params) if request.query_params else None,
        )

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            request_logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                cache_status=response.headers.get("X-Cache-Status"),
                duration_ms=round(duration_ms, 2),
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            request_logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
                error=str(exc),
            )
            raise

        finally:
            clear_correlation_id()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Authorization", "Content-Type", "X-API-Key"],
        expose_headers=[
            "X-Request-ID",
            "X-Cache-Status",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
        ],
        max_age=300,
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers.

    Args:
        app: The FastAPI application instance
    """
    exception_logger = get_logger("contentgate.exceptions")

    @app.exception_handler(GatewayError)
    async def gateway_exception_handler(
        request: Request, exc: GatewayError
    ) -> JSONResponse:
        """Render gateway errors in the standard error envelope."""
        request_id = getattr(request.state, "request_id", None)

        if exc.status_code >= 500:
            exception_logger.error(
                "Application error",
                error_code=exc.code,
                error_message=exc.message,
                status_code=exc.status_code,
                details=exc.details,
                path=request.url.path,
            )
        else:
            exception_logger.warning(
                "Client error",
                error_code=exc.code,
                error_message=exc.message,
                status_code=exc.status_code,
                path=request.url.path,
            )

        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(request_id=request_id),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions with a consistent error response."""
        request_id = getattr(request.state, "request_id", None)

        exception_logger.exception(
            "Unhandled exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": "An unexpected error occurred",
                    "request_id": request_id,
                }
            },
        )


def configure_routes(app: FastAPI) -> None:
    """Configure application routes.

    Args:
        app: The FastAPI application instance
    """

    @app.get(
        "/health/live",
        tags=["Health"],
        response_model=LivenessResponse,
        summary="Liveness probe",
        description="Returns OK if the process is running",
    )
    async def liveness(settings: SettingsDep) -> LivenessResponse:
        return LivenessResponse(status="ok", version=settings.app_version)

    @app.get(
        "/health/ready",
        tags=["Health"],
        response_model=HealthCheckResponse,
        summary="Readiness probe",
        description=(
            "Checks Redis and Strapi. Strapi is required; Redis is optional "
            "and never degrades the overall status."
        ),
        responses={503: {"model": HealthCheckResponse, "description": "Origin down"}},
    )
    async def readiness(
        settings: SettingsDep,
        health: Annotated[HealthAggregator, Depends(get_health_aggregator)],
    ) -> JSONResponse:
        report = await health.readiness()
        body = HealthCheckResponse(
            status=report.status,
            version=settings.app_version,
            checks=report.checks,
        )
        return JSONResponse(
            status_code=(
                status.HTTP_200_OK
                if report.is_ok
                else status.HTTP_503_SERVICE_UNAVAILABLE
            ),
            content=body.model_dump(),
        )

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Returns API information",
    )
    async def root(settings: SettingsDep) -> dict[str, str]:
        """API root endpoint with service information."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health/live",
        }

    from contentgate.api.v1.router import router as v1_router

    app.include_router(v1_router, prefix="/api/v1")


# Create the application instance
app = create_app()


def cli() -> None:
    """CLI entry point for running the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "contentgate.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    cli()
