"""
API router for location endpoints.
"""
from typing import Annotated, List

from fastapi import APIRouter, Path, Request, Response, status

from app.api.dependencies import (
    CurrentUserDep,
    DateRangeDep,
    PlantServiceDep,
    RecordStoreDep,
    WeatherOverviewServiceDep,
)
from app.api.v1.models.requests import LocationCreate, LocationUpdate
from app.domain.models import Location, LocationWeather, Plant
from app.middleware.rate_limit import RATE_LIMIT_RESPONSES, WEATHER_RATE_LIMIT, limiter


router = APIRouter(
    prefix="/locations",
    tags=["locations"],
)

LocationId = Annotated[str, Path(description="Unique identifier for the location")]


@router.get("", response_model=List[Location], summary="List locations")
async def list_locations(store: RecordStoreDep, user: CurrentUserDep) -> List[Location]:
    """List the current user's locations, newest first."""
    return await store.list_locations(user)


@router.post(
    "",
    response_model=Location,
    status_code=status.HTTP_201_CREATED,
    summary="Create a location",
)
async def create_location(
    payload: LocationCreate,
    store: RecordStoreDep,
    user: CurrentUserDep,
) -> Location:
    return await store.create_location(user, payload.model_dump())


@router.get(
    "/{location_id}",
    response_model=Location,
    summary="Get a location",
    responses={404: {"description": "Location not found"}},
)
async def get_location(
    location_id: LocationId,
    store: RecordStoreDep,
    user: CurrentUserDep,
) -> Location:
    return await store.get_location(user, location_id)


@router.patch(
    "/{location_id}",
    response_model=Location,
    summary="Update a location",
    description="""
    Update a location. Moving a location (changing its coordinates) clears the
    cached health scores of every plant kept there.
    """,
    responses={404: {"description": "Location not found"}},
)
async def update_location(
    location_id: LocationId,
    payload: LocationUpdate,
    plant_service: PlantServiceDep,
    user: CurrentUserDep,
) -> Location:
    return await plant_service.update_location(
        user, location_id, payload.model_dump(exclude_unset=True)
    )


@router.delete(
    "/{location_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a location",
    responses={
        404: {"description": "Location not found"},
        409: {"description": "Location still has plants associated with it"},
    },
)
async def delete_location(
    location_id: LocationId,
    store: RecordStoreDep,
    user: CurrentUserDep,
) -> Response:
    await store.delete_location(user, location_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{location_id}/plants",
    response_model=List[Plant],
    summary="List plants at a location",
)
async def list_location_plants(
    location_id: LocationId,
    store: RecordStoreDep,
    user: CurrentUserDep,
) -> List[Plant]:
    await store.get_location(user, location_id)
    return await store.list_plants_by_location(user, location_id)


@router.get(
    "/{location_id}/weather",
    response_model=LocationWeather,
    summary="Daily weather at a location",
    responses={404: {"description": "Location not found"}, **RATE_LIMIT_RESPONSES},
)
@limiter.limit(WEATHER_RATE_LIMIT)
async def get_location_weather(
    request: Request,
    location_id: LocationId,
    date_range: DateRangeDep,
    weather_service: WeatherOverviewServiceDep,
    user: CurrentUserDep,
) -> LocationWeather:
    """
    Daily precipitation and humidity for a location.

    When the weather service is unavailable, placeholder observations are
    returned and ``is_fallback`` is true.
    """
    return await weather_service.for_location(
        user, location_id, date_range.start_date, date_range.end_date
    )
