"""
Slot generation for a single calendar date.

Packs slots of ``defaultDuration`` minutes left to right through the day's
working hours, leaving ``bufferTime`` minutes between consecutive slots, then
removes slots that collide with the day's breaks. A date exception overrides
the weekly hours entirely.
"""
from datetime import date, timedelta
from typing import List

from app.schemas.availability import AvailabilityConfig, AvailabilityException, WorkingHours, Slot
from app.services.conflict_filter import filter_breaks


def generate_slots(config: AvailabilityConfig, target_date: date) -> List[Slot]:
    """
    Ordered, disjoint candidate slots for target_date.

    Returns an empty list whenever nothing is open; that is never an error.
    """
    if not config.isAvailable or config.is_expired(target_date):
        return []

    exception = config.exception_for(target_date)
    if exception is not None:
        if not exception.isAvailable:
            return []
        if exception.slots is not None:
            return explicit_slots(exception)
        # No explicit slots: the weekly entry still supplies the hours

    hours = config.hours_for(target_date)
    if hours is None or not hours.isWorking:
        return []

    candidates = pack_slots(hours, target_date, config.defaultDuration, config.bufferTime)
    return filter_breaks(candidates, config.breaks_for(target_date), target_date)


def explicit_slots(exception: AvailabilityException) -> List[Slot]:
    """Exception slots verbatim, sorted by start; no packing and no break filtering."""
    slots = []
    for time_range in exception.slots or []:
        start, end = time_range.on(exception.date)
        slots.append(Slot(start=start, end=end))
    return sorted(slots, key=lambda s: s.start)


def pack_slots(hours: WorkingHours, target_date: date, duration_minutes: int, buffer_minutes: int) -> List[Slot]:
    window_start, window_end = hours.on(target_date)
    window_minutes = int((window_end - window_start).total_seconds()) // 60
    if duration_minutes <= 0 or duration_minutes > window_minutes:
        return []

    # Offsets stay in whole minutes within the window so huge durations or
    # buffers never build a datetime past window_end
    slots = []
    offset = 0
    while offset + duration_minutes <= window_minutes:
        start = window_start + timedelta(minutes=offset)
        slots.append(Slot(start=start, end=start + timedelta(minutes=duration_minutes)))
        offset += duration_minutes + buffer_minutes
    return slots
