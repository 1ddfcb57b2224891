"""
Application service: Builds per-day plant health series from weather data.
"""
import logging
import uuid
from datetime import date, datetime, timezone
from typing import List

import numpy as np

from app.domain.models import HealthSeries, HealthSummary, PlantHealth
from app.infrastructure.weather_client import WeatherClient
from app.services.domain import health_scorer

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


class HealthSeriesBuilder:
    """
    Application service that turns weather observations into health records.

    Coordinates the weather client and the health scorer; holds no state
    of its own, so identical inputs always yield identical scores.
    """

    def __init__(self, weather_client: WeatherClient):
        """
        Initialize the builder.

        Args:
            weather_client: Client used to fetch daily observations
        """
        self.weather_client = weather_client

    async def build_series(
        self,
        plant_id: str,
        weekly_water_need: float,
        expected_humidity: float,
        latitude: float,
        longitude: float,
        start_date: date,
        end_date: date,
    ) -> HealthSeries:
        """
        Score every day the weather client returns for the range.

        Args:
            plant_id: Plant the records belong to
            weekly_water_need: Plant water need in mm per week
            expected_humidity: Plant expected relative humidity in %
            latitude: Location latitude
            longitude: Location longitude
            start_date: First day (inclusive)
            end_date: Last day (inclusive)

        Returns:
            HealthSeries in the weather client's (date-ascending) order
        """
        conditions = await self.weather_client.fetch_conditions(
            latitude, longitude, start_date, end_date
        )
        daily_water_need = weekly_water_need / DAYS_PER_WEEK
        created_at = datetime.now(timezone.utc)

        records = [
            PlantHealth(
                id=str(uuid.uuid4()),
                plant_id=plant_id,
                health_score=health_scorer.score(
                    observation.precipitation,
                    daily_water_need,
                    observation.relative_humidity,
                    expected_humidity,
                ),
                actual_water=observation.precipitation,
                actual_humidity=observation.relative_humidity,
                date=observation.date,
                created_at=created_at,
            )
            for observation in conditions.observations
        ]

        logger.debug(f"Built {len(records)} health records for plant {plant_id} "
                     f"(fallback={conditions.is_fallback})")
        return HealthSeries(
            plant_id=plant_id,
            records=records,
            is_fallback=conditions.is_fallback,
        )


def summarize(plant_id: str, records: List[PlantHealth]) -> HealthSummary:
    """
    Aggregate a health series into summary statistics.

    The trend is the least-squares slope of score against day offset, so
    it stays meaningful when days are missing from the series.
    """
    if not records:
        return HealthSummary(plant_id=plant_id, days=0)

    ordered = sorted(records, key=lambda r: r.date)
    scores = np.array([r.health_score for r in ordered], dtype=float)
    first_day = ordered[0].date
    offsets = np.array([(r.date - first_day).days for r in ordered], dtype=float)

    trend = None
    if len(ordered) >= 2 and np.ptp(offsets) > 0:
        trend = round(float(np.polyfit(offsets, scores, 1)[0]), 3)

    return HealthSummary(
        plant_id=plant_id,
        days=len(ordered),
        average_score=round(float(scores.mean()), 2),
        min_score=int(scores.min()),
        max_score=int(scores.max()),
        latest_score=int(scores[-1]),
        trend=trend,
    )
