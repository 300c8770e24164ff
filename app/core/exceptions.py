"""
Domain errors raised by the availability services.

Endpoints translate these into HTTP responses. An empty slot list or a
``False`` verdict is a normal answer and never an error.
"""
from typing import Any, Dict, List, Optional


class AvailabilityError(Exception):
    """Base class for availability service errors."""


class AvailabilityValidationError(AvailabilityError):
    """
    Malformed availability configuration.

    ``field`` is the dotted path of the first offending field, e.g.
    ``workingHours.1`` or ``breakTime.0.days``.
    """

    def __init__(self, field: str, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(f"{field}: {message}" if field else message)
        self.field = field
        self.message = message
        self.errors = errors or [{"field": field, "message": message}]

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "message": self.message, "errors": self.errors}


class ProfileNotFoundError(AvailabilityError):
    def __init__(self, profile_id: str):
        super().__init__(f"Profile {profile_id} not found")
        self.profile_id = profile_id


class AvailabilityConflictError(AvailabilityError):
    """Another writer changed the configuration since it was read."""

    def __init__(self, profile_id: str):
        super().__init__(f"Availability for profile {profile_id} was modified concurrently")
        self.profile_id = profile_id
