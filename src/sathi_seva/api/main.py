"""Main FastAPI application for Sathi Seva."""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sathi_seva import __version__
from sathi_seva.api.models import ErrorResponse
from sathi_seva.api.routes import all_routers
from sathi_seva.config import settings
from sathi_seva.container import Marketplace, create_marketplace
from sathi_seva.utils.logging import configure_logging, get_logger

# Configure logging
configure_logging()
logger = get_logger(__name__)


def create_app(marketplace: Optional[Marketplace] = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Sathi Seva API")
        app.state.marketplace = marketplace or create_marketplace()

        yield

        logger.info("Shutting down Sathi Seva API")
        try:
            await app.state.marketplace.close()
        except Exception as e:
            logger.error("Application shutdown error", error=str(e))

    app = FastAPI(
        title="Sathi Seva API",
        description="Job matching and scheduling for a local-services marketplace",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan
    )

    # Add middleware
    setup_middleware(app)

    # Add exception handlers
    setup_exception_handlers(app)

    # Include routers
    for router in all_routers:
        app.include_router(router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "name": "Sathi Seva API",
            "version": __version__,
            "status": "running",
        }

    return app


def setup_middleware(app: FastAPI) -> None:
    """Setup application middleware."""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = asyncio.get_running_loop().time()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                url=str(request.url),
                error=str(e),
                duration_seconds=asyncio.get_running_loop().time() - start_time
            )
            raise

        logger.info(
            "Request completed",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            duration_seconds=asyncio.get_running_loop().time() - start_time
        )
        return response


def setup_exception_handlers(app: FastAPI) -> None:
    """Setup global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            url=str(request.url)
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error="HTTPException",
                message=str(exc.detail),
                timestamp=datetime.now(timezone.utc)
            ).model_dump(mode="json"),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "Validation error",
            errors=len(exc.errors()),
            url=str(request.url)
        )

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="ValidationError",
                message="Request validation failed",
                details={"validation_errors": [
                    {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
                    for error in exc.errors()
                ]},
                timestamp=datetime.now(timezone.utc)
            ).model_dump(mode="json")
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            url=str(request.url)
        )

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="InternalServerError",
                message="An unexpected error occurred",
                details={"error_type": type(exc).__name__} if settings.debug else None,
                timestamp=datetime.now(timezone.utc)
            ).model_dump(mode="json")
        )


# Create the application instance
app = create_app()
