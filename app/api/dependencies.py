"""
Dependency injection for FastAPI.

Long-lived collaborators (record store, weather client, identity provider,
request generations) are created in the application lifespan and kept on
``app.state``; the factories below hand them to route handlers.
"""
from datetime import date, timedelta
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.domain.models import User
from app.infrastructure.identity_provider import IdentityProvider
from app.infrastructure.record_store import RecordStore
from app.infrastructure.weather_client import WeatherClient
from app.services.application.health_series_builder import HealthSeriesBuilder
from app.services.application.plant_service import PlantService
from app.services.application.weather_overview_service import WeatherOverviewService
from app.utils.request_generation import RequestGenerationTracker

bearer_scheme = HTTPBearer(auto_error=False)


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store


def get_weather_client(request: Request) -> WeatherClient:
    return request.app.state.weather_client


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity_provider


def get_request_generations(request: Request) -> RequestGenerationTracker:
    return request.app.state.request_generations


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> Optional[User]:
    """
    Resolve the bearer token to a user.

    Returns None for anonymous or unknown tokens; the record store is
    responsible for rejecting anonymous access.
    """
    if credentials is None:
        return None
    return await provider.get_user(credentials.credentials)


def get_health_series_builder(
    weather_client: Annotated[WeatherClient, Depends(get_weather_client)],
) -> HealthSeriesBuilder:
    """
    Dependency factory for HealthSeriesBuilder.

    Args:
        weather_client: Weather client (injected)

    Returns:
        HealthSeriesBuilder instance
    """
    return HealthSeriesBuilder(weather_client)


def get_plant_service(
    store: Annotated[RecordStore, Depends(get_record_store)],
    builder: Annotated[HealthSeriesBuilder, Depends(get_health_series_builder)],
    generations: Annotated[RequestGenerationTracker, Depends(get_request_generations)],
) -> PlantService:
    """
    Dependency factory for PlantService.

    Args:
        store: Record store (injected)
        builder: Health series builder (injected)
        generations: Request generation tracker (injected)

    Returns:
        PlantService instance
    """
    return PlantService(store=store, builder=builder, generations=generations)


def get_weather_overview_service(
    store: Annotated[RecordStore, Depends(get_record_store)],
    weather_client: Annotated[WeatherClient, Depends(get_weather_client)],
) -> WeatherOverviewService:
    return WeatherOverviewService(store=store, weather_client=weather_client)


class DateRange:
    """Inclusive date range from query parameters, defaulting to the last week."""

    def __init__(
        self,
        start_date: Annotated[Optional[date], Query(description="First day (inclusive)")] = None,
        end_date: Annotated[Optional[date], Query(description="Last day (inclusive)")] = None,
    ):
        self.end_date = end_date or date.today()
        self.start_date = start_date or self.end_date - timedelta(days=settings.default_range_days)
        if self.start_date > self.end_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="start_date must not be after end_date",
            )


# Type aliases for cleaner route signatures
CurrentUserDep = Annotated[Optional[User], Depends(get_current_user)]
RecordStoreDep = Annotated[RecordStore, Depends(get_record_store)]
PlantServiceDep = Annotated[PlantService, Depends(get_plant_service)]
WeatherOverviewServiceDep = Annotated[WeatherOverviewService, Depends(get_weather_overview_service)]
DateRangeDep = Annotated[DateRange, Depends(DateRange)]
