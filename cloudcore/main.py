"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cloudcore.api.routes import health
from cloudcore.api.routes import router as api_router
from cloudcore.core.config import Settings, get_settings
from cloudcore.core.database import build_engine_from_settings, build_session_factory
from cloudcore.models import Base
from cloudcore.services.auth import InvalidCredentials, UserAlreadyExists
from cloudcore.services.credential_store import StoreError
from cloudcore.services.monitoring import build_monitoring_service

logger = logging.getLogger(__name__)

# Sent on every response, errors and preflights included.
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create tables on startup when DB_AUTO_CREATE is set; dispose the engine on shutdown."""
    settings: Settings = app.state.settings
    engine = app.state.engine
    if settings.DB_AUTO_CREATE:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured")
    logger.info("CloudCore API started", extra={"environment": settings.APP_ENV})
    yield
    engine.dispose()
    logger.info("CloudCore API shut down")


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        in_body = any(err.get("loc", ("",))[0] == "body" for err in exc.errors())
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request body" if in_body else "Invalid request",
        )

    @app.exception_handler(InvalidCredentials)
    async def invalid_credentials_handler(request: Request, exc: InvalidCredentials) -> JSONResponse:
        return _error(status.HTTP_401_UNAUTHORIZED, exc.message)

    @app.exception_handler(UserAlreadyExists)
    async def user_exists_handler(request: Request, exc: UserAlreadyExists) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, exc.message)

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        # Internal error text stays in the logs.
        logger.error("Store unavailable: %s", exc.message, extra={"path": request.url.path})
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database connection error")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application with its own engine, session factory and monitoring service."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )

    app = FastAPI(
        title="CloudCore VM Manager API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine_from_settings(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.monitoring = build_monitoring_service(settings)

    @app.middleware("http")
    async def cors_and_errors(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error", extra={"path": request.url.path})
            response = _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
        response.headers.update(CORS_HEADERS)
        return response

    _register_error_handlers(app)
    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "CloudCore VM Manager API"}

    return app


app = create_app()
