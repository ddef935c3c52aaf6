"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from flysafe.config import settings
from flysafe.api.rate_limit import limiter
from flysafe.middleware.error_handler import ErrorHandlerMiddleware
from flysafe.api.v1.routers import drones, flight_check, safety, weather, zones

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the effective configuration on startup and close upstream clients on shutdown."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Evaluation config: wind_margin_ratio={settings.wind_margin_ratio}, "
                f"temperature_margin_c={settings.temperature_margin_c}, "
                f"timeout={settings.evaluation_timeout_seconds}s")
    logger.info(f"OpenWeatherMap fallback: {'enabled' if settings.openweathermap_api_key else 'disabled'}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    from flysafe.infrastructure.elevation_client import get_elevation_client
    from flysafe.infrastructure.weather_client import get_weather_client
    from flysafe.infrastructure.zone_client import get_zone_client
    logger.info("Shutting down application...")
    for client in (get_weather_client(), get_zone_client(), get_elevation_client()):
        await client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Flight Safety API for Recreational Drone Pilots

    This API tells a pilot whether it is safe to fly a given drone at a given
    point, and whether that point lies inside a regulated UAV zone.

    ## Features

    - **Safety Verdict**: GREEN / ORANGE / RED evaluation of wind, gusts,
      temperature, precipitation, visibility and cloud base against the
      drone's envelope
    - **Zone Lookup**: Point-in-polygon search over UAV zones, optionally
      restricted to zones active now
    - **Fail-Safe Behaviour**: Missing, invalid or late weather data always
      yields a RED verdict with an explicit "data unavailable" status
    - **Robust Error Handling**: Automatic retries with exponential backoff for
      external API calls, with a fallback weather provider
    - **Rate Limiting**: Protects the API from abuse

    ## Safety Policy

    1. RED when any hard limit is breached (wind or gusts above the drone
       limit, temperature outside its range, any precipitation, visibility
       under 2 km, cloud base under 120 m)
    2. ORANGE when a metric is marginal (wind within 10% of the limit,
       temperature within 2 °C of a limit or near freezing, visibility within
       10% of 2 km, cloud cover above 90%)
    3. GREEN otherwise
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
app.include_router(drones.router, prefix="/api/v1")
app.include_router(safety.router, prefix="/api/v1")
app.include_router(weather.router, prefix="/api/v1")
app.include_router(zones.router, prefix="/api/v1")
app.include_router(flight_check.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """Service name and version."""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Liveness check.

    Also reports which optional providers are configured, since a missing
    key silently disables the weather fallback and elevation lookups.
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "weather_fallback": bool(settings.openweathermap_api_key),
        "elevation": bool(settings.elevation_api_key),
    }
