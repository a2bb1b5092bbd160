"""
HomeServices API

FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from fastapi import FastAPI, Request
from sqlalchemy import text
from starlette.middleware.sessions import SessionMiddleware

from homeservices import __version__
from .schemas import HealthResponse
from .routes import auth, products, users, quotes
from .middleware import (
    setup_cors,
    setup_logging,
    setup_exception_handlers,
    LoggingConfig,
    get_cors_config,
)
from .dependencies import (
    get_settings,
    AppContext,
    Settings,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Creates missing tables on startup and closes the connection pool on
    shutdown.
    """
    context: AppContext = app.state.context
    logger.info(f"Starting HomeServices in {context.settings.environment} mode")

    try:
        await context.create_tables()
        logger.info("HomeServices started successfully")

        yield

    finally:
        logger.info("Shutting down HomeServices...")
        await context.dispose()
        logger.info("Shutdown complete")


# =============================================================================
# Application Factory
# =============================================================================

def create_app(settings: Settings = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="HomeServices",
        description="Home-services marketplace backend.",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.context = AppContext.from_settings(settings)

    # ==========================================================================
    # Middleware (order matters - last added = outermost)
    # ==========================================================================

    setup_exception_handlers(app)

    # Login sessions (signed cookie)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age_hours * 3600,
        https_only=settings.environment == "production",
    )

    setup_cors(app, config=get_cors_config(settings.environment))

    setup_logging(
        app,
        config=LoggingConfig(
            enabled=True,
            log_request_body=settings.debug,
        ),
        structured=settings.environment not in ("development", "test"),
    )

    # ==========================================================================
    # Routers
    # ==========================================================================

    app.include_router(auth.router)
    app.include_router(products.router)
    app.include_router(users.router)
    app.include_router(quotes.router)

    # ==========================================================================
    # Root Routes
    # ==========================================================================

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "HomeServices",
            "version": __version__,
            "status": "running",
            "docs": "/docs" if settings.debug else None,
        }

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check(request: Request) -> HealthResponse:
        """Report database reachability."""
        context: AppContext = request.app.state.context
        components = {}
        overall_healthy = True

        try:
            async with context.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            components["database"] = "healthy"
        except Exception as e:
            components["database"] = f"unhealthy: {str(e)}"
            overall_healthy = False

        return HealthResponse(
            status="healthy" if overall_healthy else "degraded",
            version=__version__,
            components=components,
        )

    return app


# =============================================================================
# Application Instance
# =============================================================================

app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

def main():
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "homeservices.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
