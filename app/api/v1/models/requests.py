"""
API request models using Pydantic.
"""
from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, field_validator


def _not_in_future(value: Optional[date]) -> Optional[date]:
    if value is not None and value > date.today():
        raise ValueError("last_watering_date cannot be in the future")
    return value


class LocationCreate(BaseModel):
    """Payload for creating a location."""
    name: str = Field(min_length=1, description="Display name, e.g. 'Balcony'")
    city: str = ""
    country: str = ""
    latitude: float = Field(ge=-90, le=90, examples=[40.7128])
    longitude: float = Field(ge=-180, le=180, examples=[-74.0060])


class LocationUpdate(BaseModel):
    """Partial update of a location; omitted fields are left unchanged."""
    name: Optional[str] = Field(default=None, min_length=1)
    city: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class PlantCreate(BaseModel):
    """Payload for creating a plant."""
    name: str = Field(min_length=1)
    species: str = ""
    plant_type: Optional[str] = Field(default=None, examples=["Succulent"])
    weekly_water_need: float = Field(gt=0, description="Weekly water need in mm")
    expected_humidity: float = Field(ge=0, le=100, description="Expected relative humidity in %")
    location_id: Optional[str] = None
    image_url: Optional[str] = None
    planted_date: date
    watering_interval: int = Field(default=7, ge=1, description="Days between waterings")
    last_watering_date: date = Field(default_factory=date.today)

    @field_validator("last_watering_date")
    @classmethod
    def check_watering_date(cls, value):
        return _not_in_future(value)


class PlantUpdate(BaseModel):
    """Partial update of a plant; omitted fields are left unchanged."""
    name: Optional[str] = Field(default=None, min_length=1)
    species: Optional[str] = None
    plant_type: Optional[str] = None
    weekly_water_need: Optional[float] = Field(default=None, gt=0)
    expected_humidity: Optional[float] = Field(default=None, ge=0, le=100)
    location_id: Optional[str] = None
    image_url: Optional[str] = None
    planted_date: Optional[date] = None
    watering_interval: Optional[int] = Field(default=None, ge=1)
    last_watering_date: Optional[date] = None

    @field_validator("last_watering_date")
    @classmethod
    def check_watering_date(cls, value):
        return _not_in_future(value)
