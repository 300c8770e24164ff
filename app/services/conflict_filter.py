"""
Conflict filtering for availability.

Removes generated slots that collide with recurring breaks, and decides
whether an arbitrary proposed interval is bookable under a configuration.
Everything here is pure: no I/O and no shared state.
"""
from datetime import date, datetime, timedelta
from typing import List

from app.schemas.availability import AvailabilityConfig, BookingWindow, BreakTime, Slot


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """Any intersection counts, not only containment. Touching edges do not overlap."""
    return start < other_end and end > other_start


def filter_breaks(slots: List[Slot], breaks: List[BreakTime], target_date: date) -> List[Slot]:
    """
    Drop every slot that overlaps one of the given breaks on target_date.

    Callers pass only the breaks active on that weekday
    (see AvailabilityConfig.breaks_for).
    """
    if not breaks:
        return list(slots)

    blocked = [b.on(target_date) for b in breaks]
    return [
        slot for slot in slots
        if not any(overlaps(slot.start, slot.end, b_start, b_end) for b_start, b_end in blocked)
    ]


def is_interval_available(config: AvailabilityConfig, start: datetime, end: datetime) -> bool:
    """
    Check whether [start, end] is bookable under the configuration.

    The interval does not need to line up with the generated slot grid; only
    the declared policy is enforced:
        1. master toggle and end date
        2. weekly working hours, compared by time of day
        3. date exception (closed, or containment in an explicit slot)
        4. recurring breaks on that weekday

    Timezone-aware inputs are read as local wall-clock times.
    """
    start = start.replace(tzinfo=None)
    end = end.replace(tzinfo=None)

    if end <= start:
        return False

    if not config.isAvailable:
        return False

    target_date = start.date()
    if config.is_expired(target_date):
        return False

    # Weekly hours are per calendar day
    if end.date() != target_date:
        return False

    hours = config.hours_for(target_date)
    if hours is None or not hours.isWorking:
        return False
    if start.time() < hours.start_time or end.time() > hours.end_time:
        return False

    exception = config.exception_for(target_date)
    if exception is not None:
        if not exception.isAvailable:
            return False
        if exception.slots is not None:
            # Explicit slots are authoritative; breaks do not apply to them
            for slot in exception.slots:
                slot_start, slot_end = slot.on(target_date)
                if start >= slot_start and end <= slot_end:
                    return True
            return False

    for b in config.breaks_for(target_date):
        b_start, b_end = b.on(target_date)
        if overlaps(start, end, b_start, b_end):
            return False

    return True


def _shift(moment: datetime, delta: timedelta) -> datetime:
    try:
        return moment + delta
    except OverflowError:
        return datetime.max


def _window_bounds(window: BookingWindow, now: datetime):
    now = now.replace(tzinfo=None)
    # Bounds past the calendar's end clamp to datetime.max
    return _shift(now, timedelta(minutes=window.minNotice)), _shift(now, timedelta(days=window.maxAdvance))


def apply_booking_window(slots: List[Slot], window: BookingWindow, now: datetime) -> List[Slot]:
    """Keep slots starting no sooner than minNotice and no later than maxAdvance from now."""
    earliest, latest = _window_bounds(window, now)
    return [slot for slot in slots if earliest <= slot.start <= latest]


def interval_within_booking_window(start: datetime, window: BookingWindow, now: datetime) -> bool:
    earliest, latest = _window_bounds(window, now)
    return earliest <= start.replace(tzinfo=None) <= latest
