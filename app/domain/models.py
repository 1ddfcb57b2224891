"""
Domain models for locations, plants and derived plant health.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, databases, etc.).
"""
from datetime import date, datetime, timedelta
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class User(BaseModel):
    """Identity fields returned by the identity provider."""
    id: str
    email: str = ""
    name: str = ""
    avatar_url: Optional[str] = None


class Location(BaseModel):
    """A named geographic site where a user keeps plants."""
    id: str
    name: str
    city: str = ""
    country: str = ""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    user_id: str
    created_at: datetime


class Plant(BaseModel):
    """A tracked specimen with care requirements and watering history."""
    id: str
    name: str
    species: str = ""
    plant_type: Optional[str] = None
    weekly_water_need: float = Field(gt=0, description="Weekly water need in mm")
    expected_humidity: float = Field(ge=0, le=100, description="Expected relative humidity in %")
    location_id: Optional[str] = None
    image_url: Optional[str] = None
    planted_date: date
    watering_interval: int = Field(ge=1, description="Days between waterings")
    last_watering_date: date
    user_id: str
    created_at: datetime

    @field_validator("last_watering_date")
    @classmethod
    def _not_in_future(cls, value: date) -> date:
        if value > date.today():
            raise ValueError("last_watering_date cannot be in the future")
        return value

    def next_watering_date(self) -> date:
        return self.last_watering_date + timedelta(days=self.watering_interval)

    def needs_watering(self, today: Optional[date] = None) -> bool:
        """True when the watering interval has elapsed."""
        return (today or date.today()) >= self.next_watering_date()


class PlantHealth(BaseModel):
    """Derived daily health score. Recomputable, never edited in place."""
    id: str
    plant_id: str
    health_score: int = Field(ge=0, le=100)
    actual_water: float = Field(description="Observed precipitation in mm")
    actual_humidity: float = Field(description="Observed relative humidity in %")
    date: date
    created_at: datetime


class WeatherObservation(BaseModel):
    """One day of weather for a coordinate pair."""
    date: date
    precipitation: float = Field(default=0.0, description="Daily precipitation sum in mm")
    relative_humidity: float = Field(default=0.0, description="Daily mean relative humidity in %")


class WeatherConditions(BaseModel):
    """Result of a weather lookup, flagged when placeholder data was substituted."""
    observations: List[WeatherObservation]
    is_fallback: bool = False


class HealthSeries(BaseModel):
    """Per-day health records for one plant over a date range."""
    plant_id: str
    records: List[PlantHealth]
    is_fallback: bool = False


class HealthSummary(BaseModel):
    """Aggregate statistics over a health series."""
    plant_id: str
    days: int
    average_score: Optional[float] = None
    min_score: Optional[int] = None
    max_score: Optional[int] = None
    latest_score: Optional[int] = None
    trend: Optional[float] = Field(
        default=None,
        description="Least-squares slope of the score, in points per day"
    )


class PlantOverview(BaseModel):
    """Dashboard entry for a single plant."""
    plant: Plant
    summary: HealthSummary
    needs_watering: bool
    is_fallback: bool = False


class Dashboard(BaseModel):
    """Overview of all of a user's plants and locations."""
    plant_count: int
    location_count: int
    average_health: Optional[float] = None
    plants_needing_water: List[str] = Field(default_factory=list)
    plants: List[PlantOverview] = Field(default_factory=list)


class LocationWeather(BaseModel):
    """Weather observations for one location, with the plants kept there."""
    location: Location
    observations: List[WeatherObservation]
    is_fallback: bool = False
    plants: List[Plant] = Field(default_factory=list)
