"""
Domain exceptions for the plant tracker.

Each exception carries the HTTP status code the API layer should answer with.
"""
from fastapi import status


class PlantTrackerError(Exception):
    """Base exception for plant tracker domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class AuthenticationRequiredError(PlantTrackerError):
    """Raised by the record store when no authenticated user is given."""
    status_code = status.HTTP_401_UNAUTHORIZED


class RecordNotFoundError(PlantTrackerError):
    """Record does not exist or belongs to another user."""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind.capitalize()} '{record_id}' not found")


class LocationInUseError(PlantTrackerError):
    """Location still referenced by one or more plants."""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, location_id: str, plant_count: int):
        self.location_id = location_id
        self.plant_count = plant_count
        super().__init__(
            f"Location '{location_id}' has {plant_count} plant(s) associated with it. "
            "Delete or move the plants first."
        )


class PlantHasNoLocationError(PlantTrackerError):
    """Health cannot be computed for a plant without coordinates."""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, plant_id: str):
        self.plant_id = plant_id
        super().__init__(f"Plant '{plant_id}' has no location; cannot fetch weather")


class RecordStoreError(PlantTrackerError):
    """The persistent store failed to complete an operation."""
    status_code = status.HTTP_502_BAD_GATEWAY
