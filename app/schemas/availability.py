from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator
from typing import Optional, List, Dict, Any, Tuple
from datetime import date, datetime, time
from enum import IntEnum

from app.utils.time_utils import parse_hhmm, day_of_week_number, day_number_from_name

DateType = date

# Upper bounds for the booking window: one year of notice, ten years ahead
MAX_NOTICE_MINUTES = 365 * 24 * 60
MAX_ADVANCE_DAYS = 3650

class DayOfWeek(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def for_date(cls, target_date: date) -> "DayOfWeek":
        return cls(day_of_week_number(target_date))

class TimeRange(BaseModel):
    start: str  # "HH:MM"
    end: str  # "HH:MM"

    @field_validator("start", "end")
    @classmethod
    def validate_hhmm(cls, v: str) -> str:
        parse_hhmm(v)
        return v

    @model_validator(mode="after")
    def validate_order(self):
        if self.start_time >= self.end_time:
            raise ValueError(f"start {self.start} must be before end {self.end}")
        return self

    @property
    def start_time(self) -> time:
        return parse_hhmm(self.start)

    @property
    def end_time(self) -> time:
        return parse_hhmm(self.end)

    def on(self, target_date: date) -> Tuple[datetime, datetime]:
        """Concrete (start, end) datetimes for this range on a date."""
        return (
            datetime.combine(target_date, self.start_time),
            datetime.combine(target_date, self.end_time),
        )

class WorkingHours(TimeRange):
    isWorking: bool = True

class BreakTime(TimeRange):
    days: List[DayOfWeek]

    @field_validator("days", mode="before")
    @classmethod
    def normalize_days(cls, v: Any) -> Any:
        # Accept weekday numbers or names ("Monday")
        if not isinstance(v, (list, tuple, set)):
            raise ValueError("days must be a list of weekdays")
        days = []
        for item in v:
            if isinstance(item, str):
                item = int(item) if item.strip().isdigit() else day_number_from_name(item)
            days.append(item)
        return days

    @field_validator("days")
    @classmethod
    def validate_days(cls, v: List[DayOfWeek]) -> List[DayOfWeek]:
        if not v:
            raise ValueError("days must not be empty")
        return sorted(set(v))

class AvailabilityException(BaseModel):
    date: DateType
    isAvailable: bool = True
    # None means no explicit slots; an empty list closes the day
    slots: Optional[List[TimeRange]] = None

    @field_validator("slots")
    @classmethod
    def validate_disjoint_slots(cls, v: Optional[List[TimeRange]]) -> Optional[List[TimeRange]]:
        if v is None:
            return v
        ordered = sorted(v, key=lambda r: r.start_time)
        for prev, nxt in zip(ordered, ordered[1:]):
            if prev.end_time > nxt.start_time:
                raise ValueError(f"Slot {nxt.start}-{nxt.end} overlaps {prev.start}-{prev.end}")
        return ordered

class BookingWindow(BaseModel):
    minNotice: int = Field(60, ge=0, le=MAX_NOTICE_MINUTES)  # minutes
    maxAdvance: int = Field(30, ge=0, le=MAX_ADVANCE_DAYS)  # days

class AvailabilityConfig(BaseModel):
    isAvailable: bool = False
    defaultDuration: int = Field(60, gt=0)  # minutes
    bufferTime: int = Field(15, ge=0)  # minutes
    endDate: Optional[DateType] = None
    workingHours: Dict[DayOfWeek, WorkingHours] = Field(default_factory=dict)
    exceptions: List[AvailabilityException] = Field(default_factory=list)
    bookingWindow: BookingWindow = Field(default_factory=BookingWindow)
    breakTime: List[BreakTime] = Field(default_factory=list)

    @field_validator("workingHours", mode="before")
    @classmethod
    def normalize_day_keys(cls, v: Any) -> Any:
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("workingHours must be an object keyed by weekday (0-6)")
        hours = {}
        for key, value in v.items():
            try:
                day = int(key)
            except (TypeError, ValueError):
                raise ValueError(f"Invalid day key '{key}', expected 0-6")
            if isinstance(key, bool) or day < 0 or day > 6:
                raise ValueError(f"Invalid day key '{key}', expected 0-6")
            hours[DayOfWeek(day)] = value
        return hours

    @field_validator("exceptions")
    @classmethod
    def validate_exception_dates(cls, v: List[AvailabilityException]) -> List[AvailabilityException]:
        seen = set()
        for exception in v:
            if exception.date in seen:
                raise ValueError(f"Duplicate exception for date {exception.date.isoformat()}")
            seen.add(exception.date)
        return sorted(v, key=lambda e: e.date)

    @field_serializer("workingHours")
    def serialize_working_hours(self, value: Dict[DayOfWeek, WorkingHours]) -> Dict[str, Any]:
        # Document keys must be strings
        return {str(int(day)): value[day].model_dump() for day in sorted(value)}

    def is_expired(self, target_date: date) -> bool:
        return self.endDate is not None and target_date > self.endDate

    def hours_for(self, target_date: date) -> Optional[WorkingHours]:
        return self.workingHours.get(DayOfWeek.for_date(target_date))

    def exception_for(self, target_date: date) -> Optional[AvailabilityException]:
        for exception in self.exceptions:
            if exception.date == target_date:
                return exception
        return None

    def breaks_for(self, target_date: date) -> List[BreakTime]:
        day = DayOfWeek.for_date(target_date)
        return [b for b in self.breakTime if day in b.days]

class Slot(BaseModel):
    start: datetime
    end: datetime

class SlotsResponse(BaseModel):
    profileId: str
    date: DateType
    slots: List[Slot]

class AvailabilityCheckResponse(BaseModel):
    profileId: str
    start: datetime
    end: datetime
    available: bool
