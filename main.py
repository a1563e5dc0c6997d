"""
QuoteDesk - FastAPI Application Entry Point

This is the main entry point for the FastAPI application.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.routers import catalog, fx, quotes, sessions
from app.services.fx_service import CurrencyDirectory, RateResolver
from app.services.quote_session import SessionStore
from app.utils.error_handling import ErrorTrackingMiddleware, setup_exception_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def init_state(app: FastAPI, resolver: RateResolver) -> None:
    """Attach the process-wide quoting services to app.state."""
    app.state.rate_resolver = resolver
    app.state.session_store = SessionStore(resolver, max_count=settings.session_max_count)
    app.state.currency_directory = CurrencyDirectory(resolver)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.app_env}")

    resolver = RateResolver()
    init_state(app, resolver)
    logger.info(f"FX providers: {', '.join(p.name for p in resolver.providers)}")

    directory_task = None
    if settings.fx_preload_currencies:
        directory_task = asyncio.create_task(app.state.currency_directory.load())

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    app.state.currency_directory.invalidate()
    if directory_task is not None and not directory_task.done():
        directory_task.cancel()
    app.state.session_store.close_all()
    logger.info("Quote sessions closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Add-on pricing quotes and outreach messages for Shopify merchants",
    version="0.1.0",
    docs_url="/api/docs" if settings.is_development else None,
    redoc_url="/api/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(ErrorTrackingMiddleware)


# ===========================================
# GLOBAL ERROR HANDLERS
# ===========================================

setup_exception_handlers(app)


# ===========================================
# ROOT ENDPOINTS
# ===========================================

@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.app_name,
        "version": "0.1.0",
        "status": "running",
        "environment": settings.app_env,
        "api_docs": "/api/docs" if settings.is_development else "disabled",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    directory = getattr(app.state, "currency_directory", None)
    return {
        "status": "healthy",
        "currencies_loaded": bool(directory and directory.loaded),
    }


@app.get(f"/api/{settings.api_version}")
async def api_root():
    """API v1 root endpoint."""
    return {
        "message": f"Welcome to {settings.app_name} API v1",
        "endpoints": {
            "catalog": "/api/v1/catalog",
            "quote_preview": "/api/v1/quotes/preview",
            "currencies": "/api/v1/fx/currencies",
            "rates": "/api/v1/fx/rates/{code}",
            "sessions": "/api/v1/sessions",
        }
    }


# ===========================================
# INCLUDE ROUTERS
# ===========================================

# Add-on catalog
app.include_router(catalog.router, prefix="/api/v1/catalog", tags=["Catalog"])

# Stateless quote preview
app.include_router(quotes.router, prefix="/api/v1/quotes", tags=["Quotes"])

# Display currencies and exchange rates
app.include_router(fx.router, prefix="/api/v1/fx", tags=["Foreign Exchange (FX)"])

# Interactive quoting sessions
app.include_router(sessions.router, prefix="/api/v1/sessions", tags=["Quote Sessions"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=5120,
        reload=settings.is_development,
    )
