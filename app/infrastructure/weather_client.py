"""
Infrastructure layer: Weather API client with fallback data.
"""
import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from app.config import settings
from app.domain.models import WeatherConditions, WeatherObservation
from app.infrastructure.api_constants import FallbackWeather, OpenMeteoEndpoints

logger = logging.getLogger(__name__)


class WeatherAPIError(Exception):
    """Non-retryable error from the weather API."""

    def __init__(self, message: str, status_code: int = 502):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _to_number(value: Any) -> float:
    """Coerce a payload value to float, 0 when missing, unparsable or not finite."""
    try:
        number = float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


class WeatherClient:
    """
    Client for daily precipitation and humidity from Open-Meteo.

    Never raises on transport or payload problems: callers always get a
    non-empty set of observations, flagged when it is placeholder data.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the weather client.

        Args:
            base_url: Weather API base URL (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
        """
        self.base_url = base_url or settings.weather_api_base_url
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"accept": "application/json"},
            timeout=timeout or settings.weather_timeout_seconds,
        )

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "WeatherClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @retry(
        stop=stop_after_attempt(settings.weather_max_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _make_request(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Issue a GET request and decode the JSON body.

        Server errors (5xx) and transport errors propagate so the retry
        policy can act on them; client errors (4xx) become WeatherAPIError.
        """
        response = await self.client.get(endpoint, params=params)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code >= 500:
                raise
            raise WeatherAPIError(
                f"Weather API request failed: {e.response.status_code} - {e.response.text}",
                status_code=e.response.status_code,
            )
        return response.json()

    def parse_daily(self, payload: Dict[str, Any]) -> List[WeatherObservation]:
        """
        Map the parallel ``daily`` arrays into observations.

        Args:
            payload: Decoded JSON response

        Returns:
            One observation per ``daily.time`` entry; empty when the
            payload carries no usable time axis
        """
        daily = payload.get("daily") if isinstance(payload, dict) else None
        if not isinstance(daily, dict):
            return []
        times = daily.get("time")
        if not isinstance(times, list) or not times:
            return []

        precipitation = _as_list(daily.get(OpenMeteoEndpoints.DAILY_PRECIPITATION))
        humidity = _as_list(daily.get(OpenMeteoEndpoints.DAILY_HUMIDITY))

        observations = []
        for i, day in enumerate(times):
            observations.append(WeatherObservation(
                date=date.fromisoformat(str(day)),
                precipitation=_to_number(precipitation[i] if i < len(precipitation) else None),
                relative_humidity=_to_number(humidity[i] if i < len(humidity) else None),
            ))
        return observations

    @staticmethod
    def fallback_observations(start_date: date, end_date: date) -> List[WeatherObservation]:
        """Deterministic placeholder pair for the range ends."""
        observations = [
            WeatherObservation(
                date=start_date,
                precipitation=FallbackWeather.START[0],
                relative_humidity=FallbackWeather.START[1],
            )
        ]
        if end_date != start_date:
            observations.append(WeatherObservation(
                date=end_date,
                precipitation=FallbackWeather.END[0],
                relative_humidity=FallbackWeather.END[1],
            ))
        return observations

    async def fetch_conditions(
        self,
        latitude: float,
        longitude: float,
        start_date: date,
        end_date: date,
    ) -> WeatherConditions:
        """
        Fetch daily precipitation and humidity for a coordinate pair.

        Args:
            latitude: Location latitude
            longitude: Location longitude
            start_date: First day (inclusive)
            end_date: Last day (inclusive)

        Returns:
            WeatherConditions ordered by date; ``is_fallback`` is set when
            placeholder data replaced a failed or empty lookup

        Raises:
            ValueError: If start_date is after end_date
        """
        if start_date > end_date:
            raise ValueError(
                f"start_date {start_date.isoformat()} is after end_date {end_date.isoformat()}"
            )

        params = OpenMeteoEndpoints.daily_params(latitude, longitude, start_date, end_date)
        logger.debug(f"Fetching weather for lat={latitude}, lon={longitude}, "
                     f"{start_date.isoformat()}..{end_date.isoformat()}")

        try:
            payload = await self._make_request(OpenMeteoEndpoints.FORECAST, params)
            observations = self.parse_daily(payload)
        except (httpx.HTTPError, WeatherAPIError, ValueError) as e:
            logger.warning(f"Weather lookup failed for ({latitude}, {longitude}): {e}; "
                           f"using fallback data")
            observations = []

        if not observations:
            logger.warning(f"No weather data for ({latitude}, {longitude}) "
                           f"{start_date.isoformat()}..{end_date.isoformat()}; using fallback data")
            return WeatherConditions(
                observations=self.fallback_observations(start_date, end_date),
                is_fallback=True,
            )

        logger.info(f"Processed {len(observations)} days of weather data")
        return WeatherConditions(observations=observations)
