"""
Application service: Orchestration layer for plant operations.
"""
import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import numpy as np

from app.domain.exceptions import PlantHasNoLocationError, RecordStoreError
from app.domain.models import (
    Dashboard,
    HealthSeries,
    HealthSummary,
    Location,
    Plant,
    PlantHealth,
    PlantOverview,
    User,
)
from app.infrastructure.record_store import RecordStore
from app.services.application.health_series_builder import HealthSeriesBuilder, summarize
from app.utils.request_generation import RequestGenerationTracker

logger = logging.getLogger(__name__)

# Plant fields whose change makes cached health scores stale
HEALTH_INPUT_FIELDS = frozenset({"weekly_water_need", "expected_humidity", "location_id"})
# Location fields whose change makes cached health scores stale
COORDINATE_FIELDS = frozenset({"latitude", "longitude"})


class PlantService:
    """
    Application service for plant and plant-health operations.

    Live recomputation is the authoritative way to get a health series;
    stored health rows are a write-through cache of it. Only the most
    recently started recompute for a plant may write to that cache, and
    invalidating a plant's cache supersedes any recompute still running.
    """

    def __init__(
        self,
        store: RecordStore,
        builder: HealthSeriesBuilder,
        generations: RequestGenerationTracker,
    ):
        """
        Initialize the service with dependencies.

        Args:
            store: Record store gateway
            builder: Health series builder
            generations: Per-plant request generation tracker
        """
        self.store = store
        self.builder = builder
        self.generations = generations

    async def _series_for(
        self,
        user: Optional[User],
        plant: Plant,
        start_date: date,
        end_date: date,
    ) -> HealthSeries:
        if not plant.location_id:
            raise PlantHasNoLocationError(plant.id)
        location = await self.store.get_location(user, plant.location_id)

        token = self.generations.begin(plant.id)
        series = await self.builder.build_series(
            plant_id=plant.id,
            weekly_water_need=plant.weekly_water_need,
            expected_humidity=plant.expected_humidity,
            latitude=location.latitude,
            longitude=location.longitude,
            start_date=start_date,
            end_date=end_date,
        )

        if series.is_fallback:
            logger.info(f"Not caching fallback health series for plant {plant.id}")
        elif not self.generations.is_current(plant.id, token):
            logger.info(f"Skipping cache write for plant {plant.id}: superseded by a newer request")
        else:
            try:
                await self.store.save_plant_health(user, series.records)
            except RecordStoreError as e:
                logger.error(f"Failed to cache health series for plant {plant.id}: {e}")
        return series

    async def get_health_series(
        self,
        user: Optional[User],
        plant_id: str,
        start_date: date,
        end_date: date,
    ) -> HealthSeries:
        """
        Recompute a plant's health series from weather data.

        Raises:
            RecordNotFoundError: If the plant or its location does not exist
            PlantHasNoLocationError: If the plant has no location
            ValueError: If start_date is after end_date
        """
        plant = await self.store.get_plant(user, plant_id)
        return await self._series_for(user, plant, start_date, end_date)

    async def get_cached_health(
        self,
        user: Optional[User],
        plant_id: str,
        start_date: date,
        end_date: date,
    ) -> List[PlantHealth]:
        """Previously stored health rows, without contacting the weather service."""
        if start_date > end_date:
            raise ValueError("start_date must not be after end_date")
        return await self.store.get_plant_health(user, plant_id, start_date, end_date)

    async def get_health_summary(
        self,
        user: Optional[User],
        plant_id: str,
        start_date: date,
        end_date: date,
    ) -> HealthSummary:
        series = await self.get_health_series(user, plant_id, start_date, end_date)
        return summarize(plant_id, series.records)

    async def update_plant(
        self,
        user: Optional[User],
        plant_id: str,
        patch: Dict[str, Any],
    ) -> Plant:
        """Update a plant, dropping cached health when its scoring inputs change."""
        before = await self.store.get_plant(user, plant_id)
        updated = await self.store.update_plant(user, plant_id, patch)
        if any(getattr(before, f) != getattr(updated, f) for f in HEALTH_INPUT_FIELDS):
            logger.info(f"Health inputs changed for plant {plant_id}; clearing cached health")
            self.generations.begin(plant_id)
            await self.store.clear_plant_health(user, plant_id)
        return updated

    async def update_location(
        self,
        user: Optional[User],
        location_id: str,
        patch: Dict[str, Any],
    ) -> Location:
        """Update a location, dropping cached health of its plants when it moves."""
        before = await self.store.get_location(user, location_id)
        updated = await self.store.update_location(user, location_id, patch)
        if any(getattr(before, f) != getattr(updated, f) for f in COORDINATE_FIELDS):
            plants = await self.store.list_plants_by_location(user, location_id)
            logger.info(f"Location {location_id} moved; clearing cached health "
                        f"for {len(plants)} plant(s)")
            for plant in plants:
                self.generations.begin(plant.id)
                await self.store.clear_plant_health(user, plant.id)
        return updated

    async def _overview(
        self,
        user: Optional[User],
        plant: Plant,
        start_date: date,
        end_date: date,
        today: date,
    ) -> PlantOverview:
        if not plant.location_id:
            return PlantOverview(
                plant=plant,
                summary=HealthSummary(plant_id=plant.id, days=0),
                needs_watering=plant.needs_watering(today),
            )
        series = await self._series_for(user, plant, start_date, end_date)
        return PlantOverview(
            plant=plant,
            summary=summarize(plant.id, series.records),
            needs_watering=plant.needs_watering(today),
            is_fallback=series.is_fallback,
        )

    async def dashboard(
        self,
        user: Optional[User],
        start_date: date,
        end_date: date,
    ) -> Dashboard:
        """
        Summarize all of the user's plants and locations.

        Per-plant health is computed concurrently; a plant whose health
        cannot be computed is logged and left out.
        """
        if start_date > end_date:
            raise ValueError("start_date must not be after end_date")

        plants, locations = await asyncio.gather(
            self.store.list_plants(user),
            self.store.list_locations(user),
        )
        today = date.today()

        results = await asyncio.gather(
            *(self._overview(user, p, start_date, end_date, today) for p in plants),
            return_exceptions=True,
        )
        overviews = []
        for plant, result in zip(plants, results):
            if isinstance(result, Exception):
                logger.error(f"Could not compute health for plant {plant.id}: {result}")
                continue
            overviews.append(result)

        averages = [o.summary.average_score for o in overviews if o.summary.average_score is not None]
        return Dashboard(
            plant_count=len(plants),
            location_count=len(locations),
            average_health=round(float(np.mean(averages)), 2) if averages else None,
            plants_needing_water=[p.id for p in plants if p.needs_watering(today)],
            plants=overviews,
        )
