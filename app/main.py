import traceback
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.router import api_router
from app.core.config import Settings, settings
from app.core.database import (
    check_connection,
    create_engine_from_url,
    create_session_factory,
    init_schema,
)
from app.core.exceptions import AlumniError
from app.core.logging import logger, setup_logging
from app.schemas import HealthResponse


def create_application(app_settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app_settings = app_settings or settings
    setup_logging(app_settings.DEBUG)

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        """Open the database once, make sure the table exists, then serve."""
        engine = create_engine_from_url(app_settings.DATABASE_URL, debug=app_settings.DEBUG)
        try:
            await init_schema(engine)
        except Exception:
            logger.exception("Failed to initialize database")
            await engine.dispose()
            raise

        application.state.engine = engine
        application.state.session_factory = create_session_factory(engine)

        logger.info(f"Starting {app_settings.PROJECT_NAME} v{app_settings.VERSION}")
        logger.info("Database connected & alumni table verified")
        if app_settings.DEBUG:
            logger.warning("DEBUG mode is ON - detailed errors will be logged to console")

        try:
            yield
        finally:
            await engine.dispose()
            logger.info("Database connection closed")

    application = FastAPI(
        title=app_settings.PROJECT_NAME,
        version=app_settings.VERSION,
        description=app_settings.DESCRIPTION,
        openapi_url=f"{app_settings.API_V1_STR}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        debug=app_settings.DEBUG,
        lifespan=lifespan,
    )
    application.state.settings = app_settings

    # Set up CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API router
    application.include_router(api_router, prefix=app_settings.API_V1_STR)

    register_health_routes(application)
    register_exception_handlers(application)

    return application


def register_health_routes(app: FastAPI) -> None:
    """Liveness and database health endpoints."""

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint."""
        return {
            "message": f"Welcome to {app.state.settings.PROJECT_NAME}",
            "version": app.state.settings.VERSION,
            "docs": "/docs",
        }

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(status="OK", message="Alumni API is running")

    @app.get("/health/db", tags=["Health"])
    async def health_db():
        """Returns 200 if a trivial query succeeds, otherwise 503."""
        try:
            await check_connection(app.state.engine)
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return JSONResponse(status_code=503, content={"db": "error", "error": str(e)})
        return {"db": "ok"}


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers. Every error body is {"error": ...}."""

    @app.exception_handler(AlumniError)
    async def alumni_error_handler(request: Request, exc: AlumniError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler - logs details to console."""

        logger.error(f"Exception: {exc.__class__.__name__}: {exc}")

        if app.debug:
            logger.error(
                f"Request: {request.method} {request.url}\n"
                f"   Path Params: {request.path_params}\n"
                f"   Query Params: {dict(request.query_params)}\n"
                f"   Client: {request.client.host if request.client else 'unknown'}\n"
                f"   Traceback:\n{traceback.format_exc()}"
            )

        content = {"error": "Internal server error"}
        if app.debug:
            content["message"] = str(exc)
        return JSONResponse(status_code=500, content=content)


app = create_application()


if __name__ == "__main__":
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
