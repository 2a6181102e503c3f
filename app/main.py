"""Main FastAPI application"""

from fastapi import FastAPI

from app.core.config import settings
from app.core.events import lifespan
from app.core.exceptions import register_exception_handlers
from app.core.middleware import setup_middleware
from app.middleware.rate_limit import limiter
from app.api.health import router as health_router
from app.api.v1 import api_router

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Demo storefront API for QA practice: catalog, session cart, checkout and auth",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# slowapi looks the limiter up on app state
app.state.limiter = limiter

register_exception_handlers(app)
setup_middleware(app)

# Include API routes
app.include_router(api_router, prefix="/api")
app.include_router(health_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/api/docs"
    }
