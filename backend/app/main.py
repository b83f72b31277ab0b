"""Main FastAPI application"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import logging
import traceback
import time
import uuid

from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from app.config import Settings, get_settings
from app.core.clock import Clock, utcnow
from app.core.database import Database, init_db
from app.core.exceptions import BaseAPIException
from app.core.metrics import REQUEST_COUNT, REQUEST_LATENCY
from app.api.deps import ACCESS_TOKEN_HEADER, REFRESH_TOKEN_HEADER, USER_ID_HEADER
from app.api.v1 import lists, users
from app.schemas.response import ErrorResponse, HealthResponse
from app.services.auth_service import AuthService
from app.services.rate_limiter import InMemoryRateLimiter
from app.services.session_manager import SessionManager
from app.services.token_service import TokenService
from app.services.user_service import UserService

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging once per process"""
    handlers = [logging.StreamHandler()]
    log_file = settings.get_log_file()
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    clock: Clock = utcnow,
) -> FastAPI:
    """
    Build the application and wire its services

    Args:
        settings: Configuration; defaults to environment settings
        database: Pre-built store handle (tests); created at startup otherwise
        clock: Time source for token and session expiry
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None
    )

    token_service = TokenService(settings, clock=clock)
    session_manager = SessionManager(token_service, settings, clock=clock)
    user_service = UserService(settings)

    app.state.settings = settings
    app.state.database = database
    app.state.token_service = token_service
    app.state.session_manager = session_manager
    app.state.user_service = user_service
    app.state.auth_service = AuthService(user_service, session_manager, token_service)
    app.state.rate_limiter = InMemoryRateLimiter()

    # GZip compression for large responses
    app.add_middleware(GZipMiddleware, minimum_size=500)

    # CORS middleware; browsers must be allowed to send and read the token headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"],
        allow_headers=[
            "Origin", "X-Requested-With", "Content-Type", "Accept",
            ACCESS_TOKEN_HEADER, REFRESH_TOKEN_HEADER, USER_ID_HEADER,
        ],
        expose_headers=[ACCESS_TOKEN_HEADER, REFRESH_TOKEN_HEADER],
    )

    # Security headers + request timing middleware
    @app.middleware("http")
    async def add_headers_and_timing(request: Request, call_next):
        """Add security headers and log slow requests"""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start = time.time()
        response = await call_next(request)
        duration = time.time() - start

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Request-ID"] = request_id

        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)
        REQUEST_COUNT.labels(request.method, path, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(request.method, path).observe(duration)

        if duration > 1.0:
            logger.warning(
                "Slow request: %s %s took %.2fs request_id=%s",
                request.method,
                request.url.path,
                duration,
                request_id,
            )

        return response

    # Exception handlers
    @app.exception_handler(BaseAPIException)
    async def api_exception_handler(request: Request, exc: BaseAPIException):
        """Handle custom API exceptions"""
        logger.info(
            f"API Exception: {exc.message}",
            extra={
                "status_code": exc.status_code,
                "path": request.url.path,
                "method": request.method
            }
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.message,
                "details": exc.details,
                "path": request.url.path,
                "timestamp": _timestamp()
            }
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors"""
        errors = []
        for error in exc.errors():
            errors.append({
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"]
            })

        logger.warning(
            f"Validation error: {errors}",
            extra={"path": request.url.path, "method": request.method}
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "success": False,
                "error": "Validation failed",
                "details": {"errors": errors},
                "path": request.url.path,
                "timestamp": _timestamp()
            }
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        """Handle database errors"""
        logger.error(
            f"Database error: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "traceback": traceback.format_exc()
            }
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "A database error occurred. Please try again later.",
                "path": request.url.path,
                "timestamp": _timestamp()
            }
        )

    # Startup event
    @app.on_event("startup")
    async def startup_event():
        """Initialize application on startup"""
        settings.validate_security_settings()
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
        logger.info(f"Environment: {settings.ENVIRONMENT}")

        if app.state.database is None:
            app.state.database = Database.from_settings(settings)

        try:
            init_db(app.state.database, settings)
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    # Shutdown event
    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown"""
        if app.state.database is not None:
            app.state.database.dispose()
        logger.info(f"Shutting down {settings.APP_NAME}")

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        db_ok = True
        db_error = None
        try:
            app.state.database.ping()
        except Exception as exc:
            db_ok = False
            db_error = str(exc)

        return {
            "status": "healthy" if db_ok else "degraded",
            "version": settings.APP_VERSION,
            "timestamp": _timestamp(),
            "database": {"ok": db_ok, "error": db_error},
        }

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/api/docs" if settings.DEBUG else "disabled"
        }

    # Include routers
    error_responses = {401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
    app.include_router(users.router, prefix="/api/v1/users", tags=["Users"], responses=error_responses)
    app.include_router(lists.router, prefix="/api/v1/lists", tags=["Lists"], responses=error_responses)

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=_settings.HOST,
        port=_settings.PORT,
        reload=_settings.DEBUG,
        workers=1 if _settings.DEBUG else _settings.WORKERS
    )
