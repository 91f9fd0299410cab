"""CityStay booking core — FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from citystay.api.v1.analytics import router as analytics_router
from citystay.api.v1.properties import router as properties_router
from citystay.api.v1.reservations import router as reservations_router
from citystay.cache.client import CacheClient
from citystay.config import settings
from citystay.database import Database

# Configure root logger so all citystay.* loggers output to stderr.
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Connect the database and cache on startup; release both on shutdown."""
    database = Database(settings.async_database_url, echo=settings.debug, pool_pre_ping=True)
    database.connect()
    if settings.database_create_schema:
        await database.create_schema()
    cache = CacheClient.from_settings(settings)
    await cache.connect()

    app.state.database = database
    app.state.cache = cache
    yield
    await cache.close()
    await database.close()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Availability, booking rules, pricing, and reservations for multi-city short-term rentals.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(properties_router)
app.include_router(reservations_router)
app.include_router(analytics_router)


@app.get("/health", tags=["health"])
async def health_check(request: Request) -> dict:
    """Health check endpoint, including cache connectivity and counters."""
    cache: CacheClient | None = getattr(request.app.state, "cache", None)
    return {
        "status": "healthy",
        "service": settings.app_name,
        "cache": cache.stats() if cache is not None else {"connected": False},
    }


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    uvicorn.run("citystay.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
