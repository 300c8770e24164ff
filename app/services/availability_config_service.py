"""
Validated writes of a profile's availability configuration.

Every write path validates the complete resulting configuration before
anything is persisted, and persists with a compare-and-swap on the profile's
``availabilityVersion`` so that concurrent edits cannot overwrite each other.
"""
from typing import Any, Dict, List, Tuple, Union
from datetime import date
import logging

from pydantic import ValidationError

from app.core.exceptions import (
    AvailabilityConflictError,
    AvailabilityValidationError,
    ProfileNotFoundError,
)
from app.db.profiles import find_profile, replace_availability
from app.schemas.availability import AvailabilityConfig, AvailabilityException

logger = logging.getLogger(__name__)

# Sub-documents merged key by key on PATCH; everything else is replaced
MERGED_KEYS = ("workingHours", "bookingWindow")


def _field_path(loc: Tuple[Union[str, int], ...]) -> str:
    return ".".join(str(int(part)) if isinstance(part, int) else str(part) for part in loc)


def _clean_message(message: str) -> str:
    prefix = "Value error, "
    return message[len(prefix):] if message.startswith(prefix) else message


def _to_validation_error(error: ValidationError, prefix: str = "") -> AvailabilityValidationError:
    errors = []
    for item in error.errors():
        path = _field_path(item["loc"])
        if prefix:
            path = f"{prefix}.{path}" if path else prefix
        errors.append({"field": path, "message": _clean_message(item["msg"])})
    first = errors[0]
    return AvailabilityValidationError(first["field"], first["message"], errors)


def validate_availability(data: Any) -> AvailabilityConfig:
    """
    Validate a raw availability configuration.

    Raises AvailabilityValidationError naming the first offending field.
    Pure: nothing is read or written.
    """
    if isinstance(data, AvailabilityConfig):
        return data
    if not isinstance(data, dict):
        raise AvailabilityValidationError("availability", "Availability must be an object")
    try:
        return AvailabilityConfig.model_validate(data)
    except ValidationError as e:
        raise _to_validation_error(e)


def merge_availability(current: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge a partial update into a stored configuration.

    workingHours merges per weekday, where a null day removes that weekday,
    and bookingWindow merges per key; any other key, lists included, replaces
    the stored value.
    """
    merged = dict(current)
    for key, value in patch.items():
        stored = current.get(key)
        if key in MERGED_KEYS and isinstance(value, dict) and isinstance(stored, dict):
            if key == "workingHours":
                combined = {str(day): hours for day, hours in stored.items()}
                for day, hours in value.items():
                    if hours is None:
                        combined.pop(str(day), None)
                    else:
                        combined[str(day)] = hours
            else:
                combined = {**stored, **value}
            merged[key] = combined
        else:
            merged[key] = value
    return merged


async def _load_profile(profile_id: str) -> Dict[str, Any]:
    profile = await find_profile(profile_id)
    if not profile:
        raise ProfileNotFoundError(profile_id)
    return profile


def _stored_availability(profile: Dict[str, Any]) -> Dict[str, Any]:
    return profile.get("availability") or AvailabilityConfig().model_dump(mode="json")


async def _persist(profile: Dict[str, Any], config: AvailabilityConfig) -> AvailabilityConfig:
    profile_id = profile["id"]
    updated = await replace_availability(
        profile_id,
        config.model_dump(mode="json"),
        profile.get("availabilityVersion", 0),
    )
    if updated is None:
        logger.warning(f"Lost availability update race for profile {profile_id}")
        raise AvailabilityConflictError(profile_id)

    logger.info(f"Availability for profile {profile_id} saved (version {updated['availabilityVersion']})")
    return AvailabilityConfig.model_validate(updated["availability"])


async def set_availability(profile_id: str, data: Dict[str, Any]) -> AvailabilityConfig:
    """
    Replace the whole availability configuration of a profile
    """
    profile = await _load_profile(profile_id)
    try:
        config = validate_availability(data)
    except AvailabilityValidationError as e:
        logger.warning(f"Rejected availability for profile {profile_id}: {e}")
        raise
    return await _persist(profile, config)


async def update_availability(profile_id: str, patch: Dict[str, Any]) -> AvailabilityConfig:
    """
    Merge a partial update into a profile's availability configuration.

    The merged result is validated as a whole; a patch that fails validation
    leaves the stored configuration untouched.
    """
    profile = await _load_profile(profile_id)
    if not isinstance(patch, dict):
        raise AvailabilityValidationError("availability", "Availability patch must be an object")

    merged = merge_availability(_stored_availability(profile), patch)
    try:
        config = validate_availability(merged)
    except AvailabilityValidationError as e:
        logger.warning(f"Rejected availability patch for profile {profile_id}: {e}")
        raise
    return await _persist(profile, config)


async def upsert_exception(profile_id: str, exception_data: Dict[str, Any]) -> AvailabilityConfig:
    """
    Add the exception for one date, replacing any existing exception for it
    """
    profile = await _load_profile(profile_id)
    try:
        exception = AvailabilityException.model_validate(exception_data)
    except ValidationError as e:
        raise _to_validation_error(e, prefix="exception")

    stored = _stored_availability(profile)
    exceptions: List[Dict[str, Any]] = [
        e for e in stored.get("exceptions", [])
        if e.get("date") != exception.date.isoformat()
    ]
    exceptions.append(exception.model_dump(mode="json"))

    config = validate_availability({**stored, "exceptions": exceptions})
    return await _persist(profile, config)


async def remove_exception(profile_id: str, exception_date: date) -> AvailabilityConfig:
    """
    Remove the exception for one date. Removing a date without an exception
    is a no-op.
    """
    profile = await _load_profile(profile_id)
    stored = _stored_availability(profile)
    remaining = [
        e for e in stored.get("exceptions", [])
        if e.get("date") != exception_date.isoformat()
    ]
    if len(remaining) == len(stored.get("exceptions", [])):
        return validate_availability(stored)

    config = validate_availability({**stored, "exceptions": remaining})
    return await _persist(profile, config)
