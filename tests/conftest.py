"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample users, locations and plants
- Sample weather observations
- In-memory record store
- Mock weather client
- FastAPI test client
"""
import pytest
from datetime import date, timedelta
from typing import Iterator
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from app.main import app
from app.api.dependencies import get_weather_client
from app.domain.models import User, WeatherConditions, WeatherObservation
from app.infrastructure.identity_provider import StaticIdentityProvider
from app.infrastructure.record_store import InMemoryRecordStore
from app.infrastructure.weather_client import WeatherClient
from app.middleware.rate_limit import limiter


TEST_TOKEN = "test-token"
OTHER_TOKEN = "other-token"


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def user() -> User:
    return User(id="user-123", email="demo@planttracker.com", name="Demo User")


@pytest.fixture
def other_user() -> User:
    return User(id="user-456", email="test@planttracker.com", name="Test User")


@pytest.fixture
def location_data() -> dict:
    """Payload for a location in New York."""
    return {
        "name": "Balcony",
        "city": "New York",
        "country": "USA",
        "latitude": 40.7128,
        "longitude": -74.0060,
    }


@pytest.fixture
def plant_data() -> dict:
    """Payload for an orchid needing 350 mm/week (50 mm/day) at 60% humidity."""
    return {
        "name": "Orchid",
        "species": "Phalaenopsis",
        "plant_type": "Flowering",
        "weekly_water_need": 350.0,
        "expected_humidity": 60.0,
        "planted_date": date(2023, 1, 15),
        "watering_interval": 7,
        "last_watering_date": date.today(),
    }


@pytest.fixture
def week_observations() -> list[WeatherObservation]:
    """Seven days of observations, ascending, ending yesterday."""
    start = date.today() - timedelta(days=7)
    return [
        WeatherObservation(
            date=start + timedelta(days=i),
            precipitation=float(10 * i),
            relative_humidity=50.0 + i,
        )
        for i in range(7)
    ]


# ============================================================
# Infrastructure Fixtures
# ============================================================

@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def mock_weather_client(week_observations):
    """Create a mock weather client returning the sample week."""
    mock_client = AsyncMock(spec=WeatherClient)
    mock_client.fetch_conditions.return_value = WeatherConditions(
        observations=week_observations
    )
    return mock_client


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client(user, other_user, mock_weather_client) -> Iterator[TestClient]:
    """
    Test client with a fresh in-memory store, static tokens and mocked weather.
    """
    limiter.reset()
    app.dependency_overrides[get_weather_client] = lambda: mock_weather_client
    with TestClient(app) as client:
        app.state.identity_provider = StaticIdentityProvider({
            TEST_TOKEN: user,
            OTHER_TOKEN: other_user,
        })
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {TEST_TOKEN}"}


@pytest.fixture
def other_auth_headers() -> dict:
    return {"Authorization": f"Bearer {OTHER_TOKEN}"}
