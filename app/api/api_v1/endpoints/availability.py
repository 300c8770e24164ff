from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from app.core.auth import get_current_user, ensure_profile_owner
from app.core.exceptions import (
    AvailabilityConflictError,
    AvailabilityValidationError,
    ProfileNotFoundError,
)
from app.schemas.availability import AvailabilityCheckResponse, AvailabilityConfig, SlotsResponse
from app.services.profile_service import get_profile_by_id
from app.services.availability_service import (
    get_availability,
    get_available_slots,
    check_availability,
    get_available_dates,
)
from app.services.availability_config_service import (
    set_availability,
    update_availability,
    upsert_exception,
    remove_exception,
)
from app.utils.time_utils import parse_date

router = APIRouter()
logger = logging.getLogger(__name__)

def _parse_date_param(value: Optional[str]):
    if not value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing date. Use YYYY-MM-DD"
        )
    try:
        return parse_date(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date format. Use YYYY-MM-DD"
        )

def _parse_datetime_param(value: Optional[str], name: str) -> datetime:
    if not value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing {name}. Use an ISO-8601 datetime"
        )
    try:
        # Offsets are dropped: times are read as the profile's wall clock
        return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name}. Use an ISO-8601 datetime"
        )

async def _owned_profile(profile_id: str, current_user: Dict[str, Any]) -> Dict[str, Any]:
    profile = await get_profile_by_id(profile_id)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )
    ensure_profile_owner(profile, current_user)
    return profile

def _write_error(error: Exception) -> HTTPException:
    if isinstance(error, ProfileNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    if isinstance(error, AvailabilityValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.to_dict())
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Availability was modified by another request. Reload and retry."
    )

@router.get("/{profile_id}/availability", response_model=AvailabilityConfig)
async def get_profile_availability(profile_id: str):
    """
    Get a profile's full availability configuration
    """
    try:
        return await get_availability(profile_id)
    except ProfileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )

@router.put("/{profile_id}/availability", response_model=AvailabilityConfig)
async def replace_profile_availability(
    profile_id: str,
    availability_data: Any = Body(...),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    """
    Replace a profile's availability configuration.
    The body is validated as a whole before anything is saved.
    """
    await _owned_profile(profile_id, current_user)
    try:
        return await set_availability(profile_id, availability_data)
    except (ProfileNotFoundError, AvailabilityValidationError, AvailabilityConflictError) as e:
        raise _write_error(e)

@router.patch("/{profile_id}/availability", response_model=AvailabilityConfig)
async def patch_profile_availability(
    profile_id: str,
    patch: Any = Body(...),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    """
    Merge a partial update into a profile's availability configuration
    """
    await _owned_profile(profile_id, current_user)
    try:
        return await update_availability(profile_id, patch)
    except (ProfileNotFoundError, AvailabilityValidationError, AvailabilityConflictError) as e:
        raise _write_error(e)

@router.put("/{profile_id}/availability/exceptions", response_model=AvailabilityConfig)
async def put_availability_exception(
    profile_id: str,
    exception_data: Dict[str, Any] = Body(...),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    """
    Add or replace the exception for one date
    """
    await _owned_profile(profile_id, current_user)
    try:
        return await upsert_exception(profile_id, exception_data)
    except (ProfileNotFoundError, AvailabilityValidationError, AvailabilityConflictError) as e:
        raise _write_error(e)

@router.delete("/{profile_id}/availability/exceptions/{exception_date}", response_model=AvailabilityConfig)
async def delete_availability_exception(
    profile_id: str,
    exception_date: str,
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    """
    Remove the exception for one date
    """
    target_date = _parse_date_param(exception_date)
    await _owned_profile(profile_id, current_user)
    try:
        return await remove_exception(profile_id, target_date)
    except (ProfileNotFoundError, AvailabilityValidationError, AvailabilityConflictError) as e:
        raise _write_error(e)

@router.get("/{profile_id}/availability/slots", response_model=SlotsResponse)
async def get_profile_slots(
    profile_id: str,
    date: Optional[str] = Query(None, description="Date to list open slots for (YYYY-MM-DD)"),
    apply_booking_window: bool = Query(False, alias="applyBookingWindow"),
    now: Optional[str] = Query(None, description="Reference time for the booking window (ISO-8601)")
):
    """
    Get the open slots of a profile for one date.
    Slots already taken by bookings are not excluded.
    """
    target_date = _parse_date_param(date)
    reference = _parse_datetime_param(now, "now") if now else None

    try:
        slots = await get_available_slots(profile_id, target_date, apply_booking_window, reference)
    except ProfileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )
    except Exception as e:
        logger.error(f"Error in get_profile_slots: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error occurred while retrieving slots"
        )

    return {"profileId": profile_id, "date": target_date, "slots": slots}

@router.get("/{profile_id}/availability/check", response_model=AvailabilityCheckResponse)
async def check_profile_availability(
    profile_id: str,
    start: Optional[str] = Query(None, description="Interval start (ISO-8601)"),
    end: Optional[str] = Query(None, description="Interval end (ISO-8601)"),
    apply_booking_window: bool = Query(False, alias="applyBookingWindow"),
    now: Optional[str] = Query(None, description="Reference time for the booking window (ISO-8601)")
):
    """
    Check whether an exact interval is bookable for a profile
    """
    start_time = _parse_datetime_param(start, "start")
    end_time = _parse_datetime_param(end, "end")
    if end_time <= start_time:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end must be after start"
        )
    reference = _parse_datetime_param(now, "now") if now else None

    try:
        available = await check_availability(profile_id, start_time, end_time, apply_booking_window, reference)
    except ProfileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )
    except Exception as e:
        logger.error(f"Error in check_profile_availability: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error occurred while checking availability"
        )

    return {"profileId": profile_id, "start": start_time, "end": end_time, "available": available}

@router.get("/{profile_id}/availability/dates", response_model=List[int])
async def get_profile_available_dates(
    profile_id: str,
    year: int = Query(..., description="Year to check availability for"),
    month: int = Query(..., description="Month to check availability for (1-12)")
):
    """
    Get the days of a month on which a profile has at least one open slot
    """
    # Validate month input
    if month < 1 or month > 12:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Month must be between 1 and 12"
        )
    if year < 1 or year > 9999:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Year must be between 1 and 9999"
        )

    try:
        return await get_available_dates(profile_id, year, month)
    except ProfileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )
