"""Adaptus API: FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routers import catalog, daily_log, phases, profile, targets, weight
from database.base import init_db
from services.logger import setup_logging

logger = logging.getLogger("api.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    await init_db()
    logger.info("Adaptus API starting...")
    yield
    # Shutdown
    logger.info("Adaptus API shutting down...")


app = FastAPI(
    title="Adaptus API",
    description="API for training-phase scheduling, weight tracking and adaptive nutrition targets",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Single-user local deployment
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(weight.router, prefix="/api/weight", tags=["Weight"])
app.include_router(profile.router, prefix="/api/nutrition/profile", tags=["Profile"])
app.include_router(phases.router, prefix="/api/nutrition/phases", tags=["Phases"])
app.include_router(targets.router, prefix="/api/nutrition", tags=["Targets"])
app.include_router(daily_log.router, prefix="/api/nutrition", tags=["Daily Log"])
app.include_router(catalog.router, prefix="/api/nutrition", tags=["Catalog"])


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint, API health check."""
    return {
        "status": "ok",
        "service": "Adaptus API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", tags=["Root"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
