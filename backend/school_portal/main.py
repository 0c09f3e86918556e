"""FastAPI application factory and main entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from school_portal.api.v1.router import api_router
from school_portal.common.request_id import REQUEST_ID_HEADER, RequestIDMiddleware
from school_portal.core.config import settings
from school_portal.core.errors import register_exception_handlers
from school_portal.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Application started", extra={"api_prefix": settings.API_PREFIX})
    yield


def create_app() -> FastAPI:
    """Build the API: request IDs, CORS, error envelope and the versioned router."""
    docs_enabled = not settings.is_production
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Bulk CSV import validation and report-card template setup",
        openapi_url="/openapi.json" if docs_enabled else None,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "ETag", "Content-Disposition"],
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app


app = create_app()
