"""
API response models using Pydantic.
"""
from datetime import date
from typing import List
from pydantic import BaseModel, Field

from app.domain.models import PlantHealth


class ImageUploadResponse(BaseModel):
    """Response model for image uploads."""
    url: str = Field(description="Public URL of the stored image")


class HealthSeriesResponse(BaseModel):
    """Response model for a plant health series."""
    plant_id: str = Field(
        description="Unique identifier for the plant"
    )
    start_date: date
    end_date: date
    is_fallback: bool = Field(
        default=False,
        description="True when placeholder weather replaced unavailable data"
    )
    records: List[PlantHealth] = Field(
        description="Daily health records, ascending by date"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "plant_id": "3f0c6d2e-6c1b-4a53-9d8e-2f4a4e1b9a10",
                "start_date": "2024-06-01",
                "end_date": "2024-06-02",
                "is_fallback": False,
                "records": [
                    {
                        "id": "b5c1...",
                        "plant_id": "3f0c6d2e-6c1b-4a53-9d8e-2f4a4e1b9a10",
                        "health_score": 82,
                        "actual_water": 4.1,
                        "actual_humidity": 64.0,
                        "date": "2024-06-01",
                        "created_at": "2024-06-03T09:00:00Z",
                    }
                ],
            }
        }
