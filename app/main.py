"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.infrastructure.identity_provider import (
    StaticIdentityProvider,
    SupabaseIdentityProvider,
)
from app.infrastructure.record_store import InMemoryRecordStore
from app.infrastructure.supabase_store import SupabaseRecordStore
from app.infrastructure.weather_client import WeatherClient
from app.middleware.error_handler import ErrorHandlerMiddleware
from app.middleware.rate_limit import limiter
from app.api.v1.routers import locations, overview, plants
from app.utils.request_generation import RequestGenerationTracker

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


async def init_state(app: FastAPI) -> None:
    """Create the record store, identity provider and weather client."""
    if settings.store_backend == "supabase":
        store = await SupabaseRecordStore.connect(
            settings.supabase_url,
            settings.supabase_key,
            settings.supabase_image_bucket,
        )
        app.state.record_store = store
        app.state.identity_provider = SupabaseIdentityProvider(store.client)
    else:
        app.state.record_store = InMemoryRecordStore()
        app.state.identity_provider = StaticIdentityProvider.from_settings(settings.static_tokens)

    app.state.weather_client = WeatherClient()
    app.state.request_generations = RequestGenerationTracker()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Record store backend: {settings.store_backend}")
    logger.info(f"Weather API: {settings.weather_api_base_url} "
                f"(attempts={settings.weather_max_attempts})")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")
    await init_state(app)

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await app.state.weather_client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Houseplant Tracking API

    Keeps track of plants, the locations they live at and their watering
    schedule, and scores their daily health against observed weather.

    ## Features

    - **Locations & Plants**: CRUD scoped to the signed-in user; a location
      cannot be deleted while plants are kept there
    - **Watering**: Record waterings and see which plants are due
    - **Health Scores**: Daily 0-100 score from precipitation and humidity at
      the plant's location versus its care requirements
    - **Weather**: Daily precipitation and humidity per location, with
      placeholder data when the weather service is unavailable
    - **Rate Limiting**: Protects the weather-backed endpoints

    ## Health Score

    Each day scores up to 50 points for water and 50 for humidity:
    1. Water: precipitation against the daily need (weekly need / 7)
    2. Humidity: relative humidity against the expected humidity, reaching
       zero at 50 percentage points of difference
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(locations.router, prefix="/api/v1")
app.include_router(plants.router, prefix="/api/v1")
app.include_router(overview.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
