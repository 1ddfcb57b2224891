"""
API router for plant endpoints.
"""
from typing import Annotated, List

from fastapi import APIRouter, File, HTTPException, Path, Request, Response, UploadFile, status

from app.api.dependencies import (
    CurrentUserDep,
    DateRangeDep,
    PlantServiceDep,
    RecordStoreDep,
)
from app.api.v1.models.requests import PlantCreate, PlantUpdate
from app.api.v1.models.responses import HealthSeriesResponse, ImageUploadResponse
from app.domain.models import HealthSummary, Plant, PlantHealth
from app.middleware.rate_limit import RATE_LIMIT_RESPONSES, WEATHER_RATE_LIMIT, limiter


router = APIRouter(
    prefix="/plants",
    tags=["plants"],
)

PlantId = Annotated[str, Path(description="Unique identifier for the plant")]

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}


@router.get("", response_model=List[Plant], summary="List plants")
async def list_plants(store: RecordStoreDep, user: CurrentUserDep) -> List[Plant]:
    """List the current user's plants, newest first."""
    return await store.list_plants(user)


@router.post(
    "",
    response_model=Plant,
    status_code=status.HTTP_201_CREATED,
    summary="Create a plant",
    responses={404: {"description": "Referenced location not found"}},
)
async def create_plant(
    payload: PlantCreate,
    store: RecordStoreDep,
    user: CurrentUserDep,
) -> Plant:
    return await store.create_plant(user, payload.model_dump())


@router.post(
    "/images",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a plant image",
)
async def upload_plant_image(
    store: RecordStoreDep,
    user: CurrentUserDep,
    file: UploadFile = File(description="Image file"),
) -> ImageUploadResponse:
    """Store an image under the current user's folder and return its public URL."""
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Unsupported image type: {file.content_type}",
        )
    content = await file.read()
    url = await store.upload_plant_image(
        user, file.filename or "image", content, file.content_type
    )
    return ImageUploadResponse(url=url)


@router.get(
    "/{plant_id}",
    response_model=Plant,
    summary="Get a plant",
    responses={404: {"description": "Plant not found"}},
)
async def get_plant(plant_id: PlantId, store: RecordStoreDep, user: CurrentUserDep) -> Plant:
    return await store.get_plant(user, plant_id)


@router.patch(
    "/{plant_id}",
    response_model=Plant,
    summary="Update a plant",
    description="""
    Update a plant. Changing its water need, expected humidity or location
    clears its cached health scores.
    """,
    responses={404: {"description": "Plant not found"}},
)
async def update_plant(
    plant_id: PlantId,
    payload: PlantUpdate,
    plant_service: PlantServiceDep,
    user: CurrentUserDep,
) -> Plant:
    return await plant_service.update_plant(
        user, plant_id, payload.model_dump(exclude_unset=True)
    )


@router.delete(
    "/{plant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a plant",
    responses={404: {"description": "Plant not found"}},
)
async def delete_plant(plant_id: PlantId, store: RecordStoreDep, user: CurrentUserDep) -> Response:
    await store.delete_plant(user, plant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{plant_id}/watering",
    response_model=Plant,
    summary="Record a watering",
    responses={404: {"description": "Plant not found"}},
)
async def record_watering(plant_id: PlantId, store: RecordStoreDep, user: CurrentUserDep) -> Plant:
    """Set the plant's last watering date to today."""
    return await store.record_watering(user, plant_id)


@router.get(
    "/{plant_id}/health",
    response_model=HealthSeriesResponse,
    summary="Compute plant health",
    description="""
    Recompute the plant's daily health scores from weather at its location.

    Each day scores up to 50 points for precipitation against the plant's
    daily water need (weekly need / 7) and up to 50 points for relative
    humidity against its expected humidity. Results are written through to
    the health cache unless placeholder weather was used.
    """,
    responses={
        404: {"description": "Plant or location not found"},
        409: {"description": "Plant has no location"},
        **RATE_LIMIT_RESPONSES,
    },
)
@limiter.limit(WEATHER_RATE_LIMIT)
async def get_plant_health(
    request: Request,
    plant_id: PlantId,
    date_range: DateRangeDep,
    plant_service: PlantServiceDep,
    user: CurrentUserDep,
) -> HealthSeriesResponse:
    series = await plant_service.get_health_series(
        user, plant_id, date_range.start_date, date_range.end_date
    )
    return HealthSeriesResponse(
        plant_id=plant_id,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        is_fallback=series.is_fallback,
        records=series.records,
    )


@router.get(
    "/{plant_id}/health/cached",
    response_model=List[PlantHealth],
    summary="Stored plant health",
    responses={404: {"description": "Plant not found"}},
)
async def get_cached_plant_health(
    plant_id: PlantId,
    date_range: DateRangeDep,
    plant_service: PlantServiceDep,
    user: CurrentUserDep,
) -> List[PlantHealth]:
    """Previously computed health rows in the range, without contacting the weather service."""
    return await plant_service.get_cached_health(
        user, plant_id, date_range.start_date, date_range.end_date
    )


@router.get(
    "/{plant_id}/health/summary",
    response_model=HealthSummary,
    summary="Plant health summary",
    responses={
        404: {"description": "Plant or location not found"},
        409: {"description": "Plant has no location"},
        **RATE_LIMIT_RESPONSES,
    },
)
@limiter.limit(WEATHER_RATE_LIMIT)
async def get_plant_health_summary(
    request: Request,
    plant_id: PlantId,
    date_range: DateRangeDep,
    plant_service: PlantServiceDep,
    user: CurrentUserDep,
) -> HealthSummary:
    return await plant_service.get_health_summary(
        user, plant_id, date_range.start_date, date_range.end_date
    )
