"""
Smart Waste Dispatch - FastAPI Application
Main entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smartwaste.config import get_settings
from smartwaste.api import (
    routes_router,
    driver_routes_router,
    bins_router,
    drivers_router,
    iot_router,
)
from smartwaste.database import async_session_maker
from smartwaste.iot import BinFillSimulator, PeriodicTask, record_snapshot


settings = get_settings()

logger = logging.getLogger("smartwaste")


def configure_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    configure_logging()
    logger.info("Starting %s v%s", settings.app_title, settings.app_version)

    # Initialize database tables (important for SQLite)
    from smartwaste.database import init_db
    await init_db()
    logger.info("Database tables initialized")

    # The simulator task always runs; pause/resume only flips its state
    tasks = [
        PeriodicTask(
            "bin-fill-simulator",
            settings.simulator_interval_seconds,
            app.state.simulator.tick,
            async_session_maker,
        )
    ]
    if settings.history_recorder_enabled:
        tasks.append(
            PeriodicTask(
                "bin-history-recorder",
                settings.history_interval_seconds,
                record_snapshot,
                async_session_maker,
            )
        )
    for task in tasks:
        task.start()

    yield

    # Shutdown
    for task in tasks:
        await task.stop()
    logger.info("Shutting down...")


# Create FastAPI application
app = FastAPI(
    title=settings.app_title,
    version=settings.app_version,
    description="""
    ## Smart Waste Dispatch API

    Plans and tracks collection routes for overfull waste bins.

    ### Features
    - **Route Generation**: Greedy nearest-driver assignment with a stop limit per route
    - **Stop Ordering**: Nearest-neighbor ordering from each driver's position
    - **Route Lifecycle**: assigned -> in_progress -> completed, with auto-completion
    - **Route Lock**: Sensor readings cannot refill bins on an active route

    ### Main Endpoints
    - `POST /api/v1/routes/auto-generate` - Replace routes for a date
    - `GET /api/v1/routes` - List routes with distance
    - `POST /api/v1/routes/start-collecting` - Start all routes of a date
    - `PATCH /api/v1/routes/{id}/collect/{bin_id}` - Collect a stop
    - `PATCH /api/v1/bins/{id}/fill` - Sensor fill reading
    """,
    lifespan=lifespan,
)

# Simulator exists before startup so the control endpoints work without lifespan
app.state.simulator = BinFillSimulator.from_settings(settings)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(routes_router, prefix=settings.api_prefix)
app.include_router(driver_routes_router, prefix=settings.api_prefix)
app.include_router(bins_router, prefix=settings.api_prefix)
app.include_router(drivers_router, prefix=settings.api_prefix)
app.include_router(iot_router, prefix=settings.api_prefix)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - health check."""
    return {
        "status": "healthy",
        "service": settings.app_title,
        "version": settings.app_version,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
    }
