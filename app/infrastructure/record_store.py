"""
Infrastructure layer: Record store gateway for locations, plants and plant health.

``RecordStore`` is the contract every backend implements. Each operation is
scoped to the calling user; a call without a user is rejected by the store.
"""
import abc
import logging
import time
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.domain.exceptions import (
    AuthenticationRequiredError,
    LocationInUseError,
    RecordNotFoundError,
)
from app.domain.models import Location, Plant, PlantHealth, User

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = frozenset({"id", "user_id", "created_at"})


def require_user(user: Optional[User]) -> User:
    """Reject anonymous access."""
    if user is None:
        raise AuthenticationRequiredError("Authentication required")
    return user


def clean_patch(patch: Dict[str, Any]) -> Dict[str, Any]:
    """Drop fields a caller may never overwrite."""
    return {k: v for k, v in patch.items() if k not in PROTECTED_FIELDS}


def image_object_path(user: User, filename: str) -> str:
    """Storage path for an uploaded image: ``{user_id}/{millis}-{suffix}.{ext}``."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    return f"{user.id}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.{ext}"


class RecordStore(abc.ABC):
    """Persistent store contract for the plant tracker."""

    # Locations

    @abc.abstractmethod
    async def list_locations(self, user: Optional[User]) -> List[Location]: ...

    @abc.abstractmethod
    async def get_location(self, user: Optional[User], location_id: str) -> Location: ...

    @abc.abstractmethod
    async def create_location(self, user: Optional[User], data: Dict[str, Any]) -> Location: ...

    @abc.abstractmethod
    async def update_location(
        self, user: Optional[User], location_id: str, patch: Dict[str, Any]
    ) -> Location: ...

    @abc.abstractmethod
    async def delete_location(self, user: Optional[User], location_id: str) -> None:
        """Delete a location; raises LocationInUseError while plants reference it."""

    # Plants

    @abc.abstractmethod
    async def list_plants(self, user: Optional[User]) -> List[Plant]: ...

    @abc.abstractmethod
    async def list_plants_by_location(
        self, user: Optional[User], location_id: str
    ) -> List[Plant]: ...

    @abc.abstractmethod
    async def get_plant(self, user: Optional[User], plant_id: str) -> Plant: ...

    @abc.abstractmethod
    async def create_plant(self, user: Optional[User], data: Dict[str, Any]) -> Plant: ...

    @abc.abstractmethod
    async def update_plant(
        self, user: Optional[User], plant_id: str, patch: Dict[str, Any]
    ) -> Plant: ...

    @abc.abstractmethod
    async def delete_plant(self, user: Optional[User], plant_id: str) -> None: ...

    @abc.abstractmethod
    async def record_watering(self, user: Optional[User], plant_id: str) -> Plant:
        """Set the plant's last watering date to today."""

    # Plant health cache

    @abc.abstractmethod
    async def get_plant_health(
        self,
        user: Optional[User],
        plant_id: str,
        start_date: date,
        end_date: date,
    ) -> List[PlantHealth]:
        """Stored health rows inside the window, ascending by date."""

    @abc.abstractmethod
    async def save_plant_health(
        self, user: Optional[User], records: Iterable[PlantHealth]
    ) -> None:
        """Upsert health rows keyed by (plant_id, date)."""

    @abc.abstractmethod
    async def clear_plant_health(self, user: Optional[User], plant_id: str) -> None: ...

    # Object storage

    @abc.abstractmethod
    async def upload_plant_image(
        self,
        user: Optional[User],
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Store an image and return its public URL."""


def _newest_first(records: Iterable[Any]) -> List[Any]:
    return sorted(reversed(list(records)), key=lambda r: r.created_at, reverse=True)


class InMemoryRecordStore(RecordStore):
    """
    Record store kept in process memory.

    State belongs to the instance; nothing is shared between stores.
    """

    def __init__(self, public_url_base: str = "memory://plant_images"):
        self.public_url_base = public_url_base
        self._locations: Dict[str, Location] = {}
        self._plants: Dict[str, Plant] = {}
        self._health: Dict[Tuple[str, date], PlantHealth] = {}
        self._images: Dict[str, Tuple[bytes, Optional[str]]] = {}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _owned_location(self, user: User, location_id: str) -> Location:
        location = self._locations.get(location_id)
        if location is None or location.user_id != user.id:
            raise RecordNotFoundError("location", location_id)
        return location

    def _owned_plant(self, user: User, plant_id: str) -> Plant:
        plant = self._plants.get(plant_id)
        if plant is None or plant.user_id != user.id:
            raise RecordNotFoundError("plant", plant_id)
        return plant

    # Locations

    async def list_locations(self, user: Optional[User]) -> List[Location]:
        user = require_user(user)
        return _newest_first(l for l in self._locations.values() if l.user_id == user.id)

    async def get_location(self, user: Optional[User], location_id: str) -> Location:
        return self._owned_location(require_user(user), location_id)

    async def create_location(self, user: Optional[User], data: Dict[str, Any]) -> Location:
        user = require_user(user)
        location = Location(
            **clean_patch(data),
            id=str(uuid.uuid4()),
            user_id=user.id,
            created_at=self._now(),
        )
        self._locations[location.id] = location
        logger.info(f"Created location {location.id} for user {user.id}")
        return location

    async def update_location(
        self, user: Optional[User], location_id: str, patch: Dict[str, Any]
    ) -> Location:
        user = require_user(user)
        existing = self._owned_location(user, location_id)
        updated = Location(**{**existing.model_dump(), **clean_patch(patch)})
        self._locations[location_id] = updated
        return updated

    async def delete_location(self, user: Optional[User], location_id: str) -> None:
        user = require_user(user)
        self._owned_location(user, location_id)
        plant_count = sum(1 for p in self._plants.values() if p.location_id == location_id)
        if plant_count:
            raise LocationInUseError(location_id, plant_count)
        del self._locations[location_id]
        logger.info(f"Deleted location {location_id}")

    # Plants

    async def list_plants(self, user: Optional[User]) -> List[Plant]:
        user = require_user(user)
        return _newest_first(p for p in self._plants.values() if p.user_id == user.id)

    async def list_plants_by_location(
        self, user: Optional[User], location_id: str
    ) -> List[Plant]:
        user = require_user(user)
        return _newest_first(
            p for p in self._plants.values()
            if p.user_id == user.id and p.location_id == location_id
        )

    async def get_plant(self, user: Optional[User], plant_id: str) -> Plant:
        return self._owned_plant(require_user(user), plant_id)

    async def create_plant(self, user: Optional[User], data: Dict[str, Any]) -> Plant:
        user = require_user(user)
        data = clean_patch(data)
        if data.get("location_id"):
            self._owned_location(user, data["location_id"])
        plant = Plant(
            **data,
            id=str(uuid.uuid4()),
            user_id=user.id,
            created_at=self._now(),
        )
        self._plants[plant.id] = plant
        logger.info(f"Created plant {plant.id} for user {user.id}")
        return plant

    async def update_plant(
        self, user: Optional[User], plant_id: str, patch: Dict[str, Any]
    ) -> Plant:
        user = require_user(user)
        existing = self._owned_plant(user, plant_id)
        patch = clean_patch(patch)
        if patch.get("location_id"):
            self._owned_location(user, patch["location_id"])
        updated = Plant(**{**existing.model_dump(), **patch})
        self._plants[plant_id] = updated
        return updated

    async def delete_plant(self, user: Optional[User], plant_id: str) -> None:
        user = require_user(user)
        self._owned_plant(user, plant_id)
        del self._plants[plant_id]
        logger.info(f"Deleted plant {plant_id}")

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
        self._owned_plant(user, plant_id)
        rows = [
            record for (pid, day), record in self._health.items()
            if pid == plant_id and start_date <= day <= end_date
        ]
        return sorted(rows, key=lambda r: r.date)

    async def save_plant_health(
        self, user: Optional[User], records: Iterable[PlantHealth]
    ) -> None:
        user = require_user(user)
        records = list(records)
        for plant_id in {record.plant_id for record in records}:
            self._owned_plant(user, plant_id)
        for record in records:
            self._health[(record.plant_id, record.date)] = record

    async def clear_plant_health(self, user: Optional[User], plant_id: str) -> None:
        user = require_user(user)
        self._owned_plant(user, plant_id)
        for key in [k for k in self._health if k[0] == plant_id]:
            del self._health[key]

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
        self._images[path] = (content, content_type)
        return f"{self.public_url_base}/{path}"
