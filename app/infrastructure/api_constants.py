"""
API endpoint constants and configuration.

This module contains the external weather API endpoint paths and related constants.
Centralizing these values makes it easy to swap out endpoints or update API versions.
"""
from datetime import date


# Open-Meteo API Endpoints
class OpenMeteoEndpoints:
    """Open-Meteo API endpoint paths."""

    FORECAST = "/v1/forecast"

    # Daily variables requested for plant health
    DAILY_PRECIPITATION = "precipitation_sum"
    DAILY_HUMIDITY = "relative_humidity_mean"

    @classmethod
    def daily_params(
        cls,
        latitude: float,
        longitude: float,
        start_date: date,
        end_date: date,
    ) -> dict[str, str | float]:
        """
        Build query parameters for a daily precipitation/humidity lookup.

        Args:
            latitude: Location latitude
            longitude: Location longitude
            start_date: First day of the range (inclusive)
            end_date: Last day of the range (inclusive)

        Returns:
            Query parameter mapping
        """
        return {
            "latitude": latitude,
            "longitude": longitude,
            "daily": f"{cls.DAILY_PRECIPITATION},{cls.DAILY_HUMIDITY}",
            "timezone": "auto",
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        }


class FallbackWeather:
    """Placeholder values substituted when the weather service is unavailable."""

    START = (2.5, 65.0)  # precipitation mm, relative humidity %
    END = (3.2, 70.0)
