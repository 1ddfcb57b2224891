"""
API router for the dashboard, weather overview and current user.
"""
from typing import List

from fastapi import APIRouter, HTTPException, Request, status

from app.api.dependencies import (
    CurrentUserDep,
    DateRangeDep,
    PlantServiceDep,
    WeatherOverviewServiceDep,
)
from app.domain.models import Dashboard, LocationWeather, User
from app.middleware.rate_limit import RATE_LIMIT_RESPONSES, WEATHER_RATE_LIMIT, limiter


router = APIRouter(tags=["overview"])


@router.get(
    "/me",
    response_model=User,
    summary="Current user",
    responses={401: {"description": "Not signed in"}},
)
async def get_me(user: CurrentUserDep) -> User:
    """Identity fields of the signed-in user, as reported by the identity provider."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


@router.get(
    "/dashboard",
    response_model=Dashboard,
    summary="Dashboard",
    description="""
    Plant and location counts, plants due for watering, and a health summary
    per plant over the range. Plants whose health cannot be computed are left
    out of the per-plant list.
    """,
    responses=RATE_LIMIT_RESPONSES,
)
@limiter.limit(WEATHER_RATE_LIMIT)
async def get_dashboard(
    request: Request,
    date_range: DateRangeDep,
    plant_service: PlantServiceDep,
    user: CurrentUserDep,
) -> Dashboard:
    return await plant_service.dashboard(user, date_range.start_date, date_range.end_date)


@router.get(
    "/weather",
    response_model=List[LocationWeather],
    summary="Weather overview",
    description="Daily weather for every location, with the plants kept at each.",
    responses=RATE_LIMIT_RESPONSES,
)
@limiter.limit(WEATHER_RATE_LIMIT)
async def get_weather_overview(
    request: Request,
    date_range: DateRangeDep,
    weather_service: WeatherOverviewServiceDep,
    user: CurrentUserDep,
) -> List[LocationWeather]:
    return await weather_service.overview(user, date_range.start_date, date_range.end_date)
