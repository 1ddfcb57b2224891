"""
Unit tests for the in-memory record store.

Tests cover:
- Location and plant CRUD
- Per-user scoping
- Location delete guard
- Health cache window, ordering and upsert
- Watering
- Anonymous access
"""
import pytest
from datetime import date, datetime, timedelta, timezone

from pydantic import ValidationError

from app.domain.exceptions import (
    AuthenticationRequiredError,
    LocationInUseError,
    RecordNotFoundError,
)
from app.domain.models import PlantHealth
from app.infrastructure import record_store
from app.infrastructure.record_store import InMemoryRecordStore


def health(plant_id: str, day: date, score: int) -> PlantHealth:
    return PlantHealth(
        id=f"{plant_id}-{day.isoformat()}-{score}",
        plant_id=plant_id,
        health_score=score,
        actual_water=1.0,
        actual_humidity=50.0,
        date=day,
        created_at=datetime.now(timezone.utc),
    )


class TestLocations:

    @pytest.mark.asyncio
    async def test_create_and_get(self, store, user, location_data):
        created = await store.create_location(user, location_data)

        fetched = await store.get_location(user, created.id)

        assert fetched == created
        assert fetched.user_id == user.id
        assert fetched.name == "Balcony"

    @pytest.mark.asyncio
    async def test_list_newest_first(self, store, user, location_data):
        first = await store.create_location(user, {**location_data, "name": "Home"})
        second = await store.create_location(user, {**location_data, "name": "Office"})

        listed = await store.list_locations(user)

        assert [l.id for l in listed] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_update_ignores_protected_fields(self, store, user, location_data):
        created = await store.create_location(user, location_data)

        updated = await store.update_location(
            user, created.id, {"name": "Terrace", "id": "hijack", "user_id": "someone"}
        )

        assert updated.id == created.id
        assert updated.user_id == user.id
        assert updated.name == "Terrace"

    @pytest.mark.asyncio
    async def test_invalid_coordinates_rejected(self, store, user, location_data):
        with pytest.raises(ValidationError):
            await store.create_location(user, {**location_data, "latitude": 91})

    @pytest.mark.asyncio
    async def test_delete(self, store, user, location_data):
        created = await store.create_location(user, location_data)

        await store.delete_location(user, created.id)

        with pytest.raises(RecordNotFoundError):
            await store.get_location(user, created.id)

    @pytest.mark.asyncio
    async def test_delete_blocked_while_plants_reference_it(
        self, store, user, location_data, plant_data
    ):
        location = await store.create_location(user, location_data)
        plant = await store.create_plant(user, {**plant_data, "location_id": location.id})

        with pytest.raises(LocationInUseError) as exc_info:
            await store.delete_location(user, location.id)

        assert exc_info.value.plant_count == 1
        assert await store.get_location(user, location.id) == location
        assert await store.get_plant(user, plant.id) == plant

    @pytest.mark.asyncio
    async def test_other_users_location_is_not_found(self, store, user, other_user, location_data):
        created = await store.create_location(user, location_data)

        with pytest.raises(RecordNotFoundError):
            await store.get_location(other_user, created.id)
        with pytest.raises(RecordNotFoundError):
            await store.delete_location(other_user, created.id)
        assert await store.list_locations(other_user) == []


class TestPlants:

    @pytest.mark.asyncio
    async def test_create_without_location(self, store, user, plant_data):
        plant = await store.create_plant(user, plant_data)

        assert plant.location_id is None
        assert plant.weekly_water_need == 350.0
        assert await store.list_plants(user) == [plant]

    @pytest.mark.asyncio
    async def test_create_with_unknown_location(self, store, user, plant_data):
        with pytest.raises(RecordNotFoundError):
            await store.create_plant(user, {**plant_data, "location_id": "missing"})

    @pytest.mark.asyncio
    async def test_list_by_location(self, store, user, location_data, plant_data):
        home = await store.create_location(user, location_data)
        office = await store.create_location(user, {**location_data, "name": "Office"})
        at_home = await store.create_plant(user, {**plant_data, "location_id": home.id})
        await store.create_plant(user, {**plant_data, "location_id": office.id})

        assert await store.list_plants_by_location(user, home.id) == [at_home]

    @pytest.mark.asyncio
    async def test_future_watering_date_rejected(self, store, user, plant_data):
        tomorrow = date.today() + timedelta(days=1)

        with pytest.raises(ValidationError):
            await store.create_plant(user, {**plant_data, "last_watering_date": tomorrow})

    @pytest.mark.asyncio
    async def test_update(self, store, user, plant_data):
        plant = await store.create_plant(user, plant_data)

        updated = await store.update_plant(user, plant.id, {"watering_interval": 3})

        assert updated.watering_interval == 3
        assert updated.name == plant.name

    @pytest.mark.asyncio
    async def test_delete_leaves_health_rows_unreachable(self, store, user, plant_data):
        plant = await store.create_plant(user, plant_data)
        await store.save_plant_health(user, [health(plant.id, date.today(), 80)])

        await store.delete_plant(user, plant.id)

        with pytest.raises(RecordNotFoundError):
            await store.get_plant(user, plant.id)
        with pytest.raises(RecordNotFoundError):
            await store.get_plant_health(user, plant.id, date.min, date.max)

    @pytest.mark.asyncio
    async def test_record_watering_sets_today(self, store, user, plant_data):
        plant = await store.create_plant(
            user, {**plant_data, "last_watering_date": date.today() - timedelta(days=10)}
        )

        watered = await store.record_watering(user, plant.id)

        assert watered.last_watering_date == date.today()
        assert watered.needs_watering() is False

    @pytest.mark.asyncio
    async def test_other_users_plant_is_not_found(self, store, user, other_user, plant_data):
        plant = await store.create_plant(user, plant_data)

        with pytest.raises(RecordNotFoundError):
            await store.update_plant(other_user, plant.id, {"name": "Mine now"})
        with pytest.raises(RecordNotFoundError):
            await store.record_watering(other_user, plant.id)


class TestPlantHealthCache:

    @pytest.mark.asyncio
    async def test_window_and_order(self, store, user, plant_data):
        plant = await store.create_plant(user, plant_data)
        base = date(2024, 6, 1)
        await store.save_plant_health(user, [
            health(plant.id, base + timedelta(days=3), 30),
            health(plant.id, base, 0),
            health(plant.id, base + timedelta(days=1), 10),
            health(plant.id, base + timedelta(days=10), 99),
        ])

        rows = await store.get_plant_health(user, plant.id, base, base + timedelta(days=3))

        assert [r.health_score for r in rows] == [0, 10, 30]

    @pytest.mark.asyncio
    async def test_upsert_by_plant_and_date(self, store, user, plant_data):
        plant = await store.create_plant(user, plant_data)
        day = date(2024, 6, 1)

        await store.save_plant_health(user, [health(plant.id, day, 40)])
        await store.save_plant_health(user, [health(plant.id, day, 70)])

        rows = await store.get_plant_health(user, plant.id, day, day)
        assert [r.health_score for r in rows] == [70]

    @pytest.mark.asyncio
    async def test_clear(self, store, user, plant_data):
        plant = await store.create_plant(user, plant_data)
        await store.save_plant_health(user, [health(plant.id, date(2024, 6, 1), 40)])

        await store.clear_plant_health(user, plant.id)

        assert await store.get_plant_health(user, plant.id, date.min, date.max) == []

    @pytest.mark.asyncio
    async def test_clear_rejects_other_users_plant(self, store, user, other_user, plant_data):
        plant = await store.create_plant(user, plant_data)
        await store.save_plant_health(user, [health(plant.id, date(2024, 6, 1), 40)])

        with pytest.raises(RecordNotFoundError):
            await store.clear_plant_health(other_user, plant.id)

        assert len(await store.get_plant_health(user, plant.id, date.min, date.max)) == 1

    @pytest.mark.asyncio
    async def test_save_rejects_other_users_plant_without_partial_write(
        self, store, user, other_user, plant_data
    ):
        own = await store.create_plant(other_user, plant_data)
        foreign = await store.create_plant(user, plant_data)

        with pytest.raises(RecordNotFoundError):
            await store.save_plant_health(other_user, [
                health(own.id, date(2024, 6, 1), 40),
                health(foreign.id, date(2024, 6, 1), 40),
            ])

        assert await store.get_plant_health(other_user, own.id, date.min, date.max) == []


class TestImages:

    @pytest.mark.asyncio
    async def test_upload_returns_user_scoped_url(self, store, user):
        url = await store.upload_plant_image(user, "fern.JPG", b"\xff\xd8", "image/jpeg")

        assert url.startswith(f"memory://plant_images/{user.id}/")
        assert url.endswith(".jpg")

    @pytest.mark.asyncio
    async def test_same_millisecond_uploads_do_not_collide(self, store, user, monkeypatch):
        monkeypatch.setattr(record_store.time, "time", lambda: 1717236000.5)

        first = await store.upload_plant_image(user, "a.png", b"1", "image/png")
        second = await store.upload_plant_image(user, "a.png", b"2", "image/png")

        assert first != second
        assert "/1717236000500-" in first


class TestAnonymousAccess:

    @pytest.mark.asyncio
    async def test_every_operation_requires_a_user(self, store, location_data, plant_data):
        calls = [
            store.list_locations(None),
            store.create_location(None, location_data),
            store.list_plants(None),
            store.create_plant(None, plant_data),
            store.get_plant_health(None, "p", date.min, date.max),
            store.record_watering(None, "p"),
            store.upload_plant_image(None, "a.png", b""),
        ]
        for call in calls:
            with pytest.raises(AuthenticationRequiredError):
                await call
