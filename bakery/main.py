"""
FastAPI Application Entry Point - Bakery Service
"""
import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from bakery.config import settings
from bakery.database import init_db
from bakery.api import admin, auth, catalog, health, orders, profile
from bakery.api.deps import rate_limiter
from bakery.services.rate_limiter import run_sweeper

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Bakery Service",
    description="Bread ordering storefront, customer order history and admin dashboard",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(catalog.router)
app.include_router(orders.router)
app.include_router(profile.router)
app.include_router(auth.router)
app.include_router(admin.router)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


@app.on_event("startup")
async def startup_event():
    """Initialize database and start the rate limit sweeper"""
    logger.info("Starting %s...", settings.SERVICE_NAME)
    init_db()
    logger.info("✓ Database initialized")
    app.state.sweeper = asyncio.create_task(
        run_sweeper(rate_limiter, settings.RATE_LIMIT_SWEEP_INTERVAL)
    )
    logger.info("✓ Rate limit sweep every %ss", settings.RATE_LIMIT_SWEEP_INTERVAL)
    logger.info("✓ Auth provider URL: %s", settings.AUTH_URL)
    logger.info("✓ RabbitMQ URL: %s (events %s)", settings.RABBITMQ_URL,
                "enabled" if settings.EVENTS_ENABLED else "disabled")
    logger.info("✓ %s is running on port %s", settings.SERVICE_NAME, settings.SERVICE_PORT)


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down %s...", settings.SERVICE_NAME)
    sweeper = getattr(app.state, "sweeper", None)
    if sweeper:
        sweeper.cancel()
