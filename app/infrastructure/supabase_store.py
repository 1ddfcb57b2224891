"""
Infrastructure layer: Record store backed by a hosted Supabase project.

Tables ``locations``, ``plants`` and ``plant_health`` are accessed through
PostgREST; plant images go to a public storage bucket.
"""
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import httpx
from fastapi.encoders import jsonable_encoder
from postgrest import APIError
from supabase import AsyncClient, acreate_client

from app.domain.exceptions import (
    LocationInUseError,
    RecordNotFoundError,
    RecordStoreError,
)
from app.domain.models import Location, Plant, PlantHealth, User
from app.infrastructure.record_store import (
    RecordStore,
    clean_patch,
    image_object_path,
    require_user,
)

logger = logging.getLogger(__name__)

LOCATIONS = "locations"
PLANTS = "plants"
PLANT_HEALTH = "plant_health"


class SupabaseRecordStore(RecordStore):
    """
    Record store using the Supabase async client.

    Rows are filtered by ``user_id`` on every call, on top of whatever
    row-level security the project enforces.
    """

    def __init__(self, client: AsyncClient, image_bucket: str = "plant_images"):
        """
        Initialize the store.

        Args:
            client: Connected Supabase async client
            image_bucket: Storage bucket for plant images
        """
        self.client = client
        self.image_bucket = image_bucket

    @classmethod
    async def connect(cls, url: str, key: str, image_bucket: str) -> "SupabaseRecordStore":
        """Create a client for the project and wrap it in a store."""
        if not url or not key:
            raise ValueError("supabase_url and supabase_key must be set for the supabase backend")
        client = await acreate_client(url, key)
        logger.info("Supabase client initialized successfully")
        return cls(client, image_bucket)

    async def _execute(self, query, action: str) -> List[Dict[str, Any]]:
        try:
            response = await query.execute()
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"Supabase error while trying to {action}: {e}")
            raise RecordStoreError(f"Failed to {action}") from e
        return response.data or []

    # Locations

    async def list_locations(self, user: Optional[User]) -> List[Location]:
        user = require_user(user)
        rows = await self._execute(
            self.client.table(LOCATIONS).select("*")
            .eq("user_id", user.id)
            .order("created_at", desc=True),
            "list locations",
        )
        return [Location(**row) for row in rows]

    async def get_location(self, user: Optional[User], location_id: str) -> Location:
        user = require_user(user)
        rows = await self._execute(
            self.client.table(LOCATIONS).select("*")
            .eq("id", location_id)
            .eq("user_id", user.id)
            .limit(1),
            "get location",
        )
        if not rows:
            raise RecordNotFoundError("location", location_id)
        return Location(**rows[0])

    async def create_location(self, user: Optional[User], data: Dict[str, Any]) -> Location:
        user = require_user(user)
        row = jsonable_encoder({**clean_patch(data), "user_id": user.id})
        rows = await self._execute(self.client.table(LOCATIONS).insert(row), "create location")
        return Location(**rows[0])

    async def update_location(
        self, user: Optional[User], location_id: str, patch: Dict[str, Any]
    ) -> Location:
        user = require_user(user)
        rows = await self._execute(
            self.client.table(LOCATIONS)
            .update(jsonable_encoder(clean_patch(patch)))
            .eq("id", location_id)
            .eq("user_id", user.id),
            "update location",
        )
        if not rows:
            raise RecordNotFoundError("location", location_id)
        return Location(**rows[0])

    async def delete_location(self, user: Optional[User], location_id: str) -> None:
        user = require_user(user)
        await self.get_location(user, location_id)
        plants = await self._execute(
            self.client.table(PLANTS).select("id").eq("location_id", location_id),
            "check location plants",
        )
        if plants:
            raise LocationInUseError(location_id, len(plants))
        await self._execute(
            self.client.table(LOCATIONS).delete()
            .eq("id", location_id)
            .eq("user_id", user.id),
            "delete location",
        )

    # Plants

    async def list_plants(self, user: Optional[User]) -> List[Plant]:
        user = require_user(user)
        rows = await self._execute(
            self.client.table(PLANTS).select("*")
            .eq("user_id", user.id)
            .order("created_at", desc=True),
            "list plants",
        )
        return [Plant(**row) for row in rows]

    async def list_plants_by_location(
        self, user: Optional[User], location_id: str
    ) -> List[Plant]:
        user = require_user(user)
        rows = await self._execute(
            self.client.table(PLANTS).select("*")
            .eq("user_id", user.id)
            .eq("location_id", location_id)
            .order("created_at", desc=True),
            "list location plants",
        )
        return [Plant(**row) for row in rows]

    async def get_plant(self, user: Optional[User], plant_id: str) -> Plant:
        user = require_user(user)
        rows = await self._execute(
            self.client.table(PLANTS).select("*")
            .eq("id", plant_id)
            .eq("user_id", user.id)
            .limit(1),
            "get plant",
        )
        if not rows:
            raise RecordNotFoundError("plant", plant_id)
        return Plant(**rows[0])

    async def create_plant(self, user: Optional[User], data: Dict[str, Any]) -> Plant:
        user = require_user(user)
        data = clean_patch(data)
        if data.get("location_id"):
            await self.get_location(user, data["location_id"])
        row = jsonable_encoder({**data, "user_id": user.id})
        rows = await self._execute(self.client.table(PLANTS).insert(row), "create plant")
        return Plant(**rows[0])

    async def update_plant(
        self, user: Optional[User], plant_id: str, patch: Dict[str, Any]
    ) -> Plant:
        user = require_user(user)
        patch = clean_patch(patch)
        if patch.get("location_id"):
            await self.get_location(user, patch["location_id"])
        rows = await self._execute(
            self.client.table(PLANTS)
            .update(jsonable_encoder(patch))
            .eq("id", plant_id)
            .eq("user_id", user.id),
            "update plant",
        )
        if not rows:
            raise RecordNotFoundError("plant", plant_id)
        return Plant(**rows[0])

    async def delete_plant(self, user: Optional[User], plant_id: str) -> None:
        user = require_user(user)
        rows = await self._execute(
            self.client.table(PLANTS).delete()
            .eq("id", plant_id)
            .eq("user_id", user.id),
            "delete plant",
        )
        if not rows:
            raise RecordNotFoundError("plant", plant_id)

    async def record_watering(self, user: Optional[User], plant_id: str) -> Plant:
        return await self.update_plant(user, plant_id, {"last_watering_date": date.today()})

    # Plant health cache

    async def get_plant_health(
        self,
        user: Optional[User],
        plant_id: str,
        start_date: date,
        end_date: date,
    ) -> List[PlantHealth]:
        user = require_user(user)
        await self.get_plant(user, plant_id)
        rows = await self._execute(
            self.client.table(PLANT_HEALTH).select("*")
            .eq("plant_id", plant_id)
            .gte("date", start_date.isoformat())
            .lte("date", end_date.isoformat())
            .order("date"),
            "get plant health",
        )
        return [PlantHealth(**row) for row in rows]

    async def save_plant_health(
        self, user: Optional[User], records: Iterable[PlantHealth]
    ) -> None:
        user = require_user(user)
        rows = [record.model_dump(mode="json") for record in records]
        if not rows:
            return
        for plant_id in sorted({row["plant_id"] for row in rows}):
            await self.get_plant(user, plant_id)
        await self._execute(
            self.client.table(PLANT_HEALTH).upsert(rows, on_conflict="plant_id,date"),
            "save plant health",
        )

    async def clear_plant_health(self, user: Optional[User], plant_id: str) -> None:
        user = require_user(user)
        await self.get_plant(user, plant_id)
        await self._execute(
            self.client.table(PLANT_HEALTH).delete().eq("plant_id", plant_id),
            "clear plant health",
        )

    # Object storage

    async def upload_plant_image(
        self,
        user: Optional[User],
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        user = require_user(user)
        path = image_object_path(user, filename)
        bucket = self.client.storage.from_(self.image_bucket)
        options = {"content-type": content_type} if content_type else None
        try:
            await bucket.upload(path, content, options)
            return await bucket.get_public_url(path)
        except Exception as e:
            logger.error(f"Supabase storage error while uploading {path}: {e}")
            raise RecordStoreError("Failed to upload plant image") from e
