from typing import List, Optional
from datetime import date, datetime
from calendar import monthrange
import logging

from app.core.exceptions import ProfileNotFoundError
from app.db.profiles import find_profile
from app.schemas.availability import AvailabilityConfig, Slot
from app.services.conflict_filter import (
    apply_booking_window,
    interval_within_booking_window,
    is_interval_available,
)
from app.services.slot_generator import generate_slots

logger = logging.getLogger(__name__)

async def get_availability(profile_id: str) -> AvailabilityConfig:
    """
    Load a profile's availability configuration
    """
    profile = await find_profile(profile_id)
    if not profile:
        raise ProfileNotFoundError(profile_id)
    return AvailabilityConfig.model_validate(profile.get("availability") or {})

async def get_available_slots(
    profile_id: str,
    target_date: date,
    apply_window: bool = False,
    now: Optional[datetime] = None
) -> List[Slot]:
    """
    Open slots for a date.

    The booking window is advisory and only applied when apply_window is set.
    Slots already taken by bookings are not tracked here.
    """
    config = await get_availability(profile_id)
    slots = generate_slots(config, target_date)
    if apply_window:
        slots = apply_booking_window(slots, config.bookingWindow, now or datetime.now())
    logger.debug(f"{len(slots)} open slots for profile {profile_id} on {target_date}")
    return slots

async def check_availability(
    profile_id: str,
    start: datetime,
    end: datetime,
    apply_window: bool = False,
    now: Optional[datetime] = None
) -> bool:
    """
    Whether [start, end] is bookable for a profile
    """
    config = await get_availability(profile_id)
    if not is_interval_available(config, start, end):
        return False
    if apply_window:
        return interval_within_booking_window(start, config.bookingWindow, now or datetime.now())
    return True

async def get_available_dates(profile_id: str, year: int, month: int) -> List[int]:
    """
    Get available dates for a specific month and year
    Returns the days of the month that have at least one open slot
    """
    config = await get_availability(profile_id)

    # Get the number of days in the month
    _, num_days = monthrange(year, month)

    return [
        day for day in range(1, num_days + 1)
        if generate_slots(config, date(year, month, day))
    ]
