"""
Application service: Weather across all of a user's locations.
"""
import asyncio
from datetime import date
from typing import List, Optional

from app.domain.models import Location, LocationWeather, Plant, User
from app.infrastructure.record_store import RecordStore
from app.infrastructure.weather_client import WeatherClient


class WeatherOverviewService:
    """Fetches weather for every location concurrently."""

    def __init__(self, store: RecordStore, weather_client: WeatherClient):
        self.store = store
        self.weather_client = weather_client

    async def location_weather(
        self,
        location: Location,
        plants: List[Plant],
        start_date: date,
        end_date: date,
    ) -> LocationWeather:
        conditions = await self.weather_client.fetch_conditions(
            location.latitude, location.longitude, start_date, end_date
        )
        return LocationWeather(
            location=location,
            observations=conditions.observations,
            is_fallback=conditions.is_fallback,
            plants=[p for p in plants if p.location_id == location.id],
        )

    async def for_location(
        self,
        user: Optional[User],
        location_id: str,
        start_date: date,
        end_date: date,
    ) -> LocationWeather:
        location = await self.store.get_location(user, location_id)
        plants = await self.store.list_plants_by_location(user, location_id)
        return await self.location_weather(location, plants, start_date, end_date)

    async def overview(
        self,
        user: Optional[User],
        start_date: date,
        end_date: date,
    ) -> List[LocationWeather]:
        """
        Weather and plants for each location, in location list order.

        Raises:
            ValueError: If start_date is after end_date
        """
        if start_date > end_date:
            raise ValueError("start_date must not be after end_date")
        locations, plants = await asyncio.gather(
            self.store.list_locations(user),
            self.store.list_plants(user),
        )
        return list(await asyncio.gather(
            *(self.location_weather(loc, plants, start_date, end_date) for loc in locations)
        ))
