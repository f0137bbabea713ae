"""
FastAPI application entry point.

This is the main application that ties together all components:
- API routes for invoice calculation, preview, export and numbering
- Database lifecycle management for the sequence counters
- CORS configuration for the editor frontend
- Error handling and logging
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from faktur import __version__
from faktur.api.routes import health, invoices, numbering
from faktur.config import get_settings
from faktur.infrastructure.database import close_db, init_db

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Creates the sequence counter table on startup and releases database
    connections on shutdown.
    """
    settings = get_settings()

    logger.info(f"Starting Faktur v{__version__}")
    logger.info(f"Invoice prefix: {settings.invoice_prefix}")
    logger.info(f"Debug mode: {settings.debug}")

    try:
        init_db()
        logger.info("Database initialized")
    except SQLAlchemyError as e:
        # Calculation, preview and export still work; numbering will not
        logger.error(f"Database initialization failed: {e}")

    yield

    logger.info("Shutting down Faktur")
    close_db()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance ready to serve requests.
    """
    settings = get_settings()

    app = FastAPI(
        title="Faktur API",
        description=(
            "Invoice document generator.\n\n"
            "Calculates rupiah totals with PPN, renders printable invoices "
            "and issues daily invoice numbers."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health.router)
    app.include_router(invoices.router, prefix="/api/v1")
    app.include_router(numbering.router, prefix="/api/v1")

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all exception handler for unhandled errors."""
        logger.exception(f"Unhandled error: {exc}")

        # Don't expose internal errors in production
        if settings.debug:
            detail = str(exc)
        else:
            detail = "An internal error occurred"

        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": detail,
            },
        )

    return app


# Create the application instance
app = create_app()


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "faktur.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
