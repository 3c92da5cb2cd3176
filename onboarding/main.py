"""Staff Onboarding API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from onboarding.catalog.repository import (
    CassandraModuleRepository,
    InMemoryModuleRepository,
    ModuleRepository,
)
from onboarding.catalog.router import router as catalog_admin_router
from onboarding.catalog.service import CatalogService
from onboarding.config import Settings, get_settings
from onboarding.core.context import get_request_id
from onboarding.core.database import init_async_cassandra, shutdown_async_cassandra
from onboarding.core.logging import configure_structlog, get_logger
from onboarding.core.middleware import RequestContextMiddleware
from onboarding.core.redis import init_redis, shutdown_redis
from onboarding.health import router as health_router
from onboarding.progress.gateway import (
    CassandraProgressGateway,
    InMemoryProgressGateway,
    ProgressGateway,
)
from onboarding.progress.router import admin_router as learners_admin_router
from onboarding.progress.router import modules_router
from onboarding.progress.router import router as progress_router
from onboarding.progress.service import TrainingService
from onboarding.quiz.router import router as quiz_router
from onboarding.quiz.store import (
    InMemoryQuizSessionStore,
    QuizSessionStore,
    RedisQuizSessionStore,
)
from onboarding.reports.router import router as reports_router
from onboarding.reports.service import ReportService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


async def _init_storage(
    settings: Settings,
) -> tuple[Any, ModuleRepository, ProgressGateway]:
    """Cassandra-backed storage, or in-memory storage without a database."""
    if settings.cassandra_enabled:
        try:
            session = await init_async_cassandra()
            return (
                session,
                CassandraModuleRepository(session, settings.cassandra_keyspace),
                CassandraProgressGateway(session, settings.cassandra_keyspace),
            )
        except Exception as e:
            logger.warning(
                "database_init_skipped",
                error=str(e),
                message="Running with in-memory storage",
            )
    return None, InMemoryModuleRepository(), InMemoryProgressGateway()


async def _init_quiz_sessions(settings: Settings) -> tuple[Any, QuizSessionStore]:
    """Redis-backed quiz sessions, or process memory without Redis."""
    if settings.redis_enabled:
        try:
            redis_client = await init_redis()
            return redis_client, RedisQuizSessionStore(
                redis_client, settings.quiz_session_ttl_seconds
            )
        except Exception as e:
            logger.warning(
                "redis_init_skipped",
                error=str(e),
                message="Quiz sessions kept in process memory",
            )
    return None, InMemoryQuizSessionStore()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    session, repository, gateway = await _init_storage(settings)
    redis_client, quiz_sessions = await _init_quiz_sessions(settings)

    app.state.cassandra_session = session
    app.state.redis = redis_client

    app.state.catalog_service = CatalogService(repository)
    app.state.training_service = TrainingService(
        catalog=app.state.catalog_service,
        gateway=gateway,
        sessions=quiz_sessions,
        pass_mark=settings.quiz_pass_mark,
        max_failed_attempts=settings.quiz_max_failed_attempts,
        default_folder=settings.default_folder,
    )
    app.state.report_service = ReportService(app.state.catalog_service, gateway)
    logger.info(
        "services_initialized",
        cassandra_enabled=session is not None,
        redis_enabled=redis_client is not None,
    )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await shutdown_redis()
    await shutdown_async_cassandra()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # debug stays off so Starlette never renders stack traces in responses
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Staff onboarding and training API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        request_id = _get_request_id_safe(request)

        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "message": str(exc.detail)
                if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                else "Internal server error",
                "status_code": exc.status_code,
                "request_id": request_id,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle validation errors with safe error messages."""
        request_id = _get_request_id_safe(request)

        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "message": "Validation error",
                "status_code": 422,
                "request_id": request_id,
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions.

        Full details are logged; the response carries a generic message only.
        """
        request_id = _get_request_id_safe(request)

        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "message": "An unexpected error occurred. Please try again later.",
                "status_code": 500,
                "request_id": request_id,
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(modules_router)
    app.include_router(progress_router)
    app.include_router(quiz_router)
    app.include_router(catalog_admin_router)
    app.include_router(reports_router)
    app.include_router(learners_admin_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Staff Onboarding API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
