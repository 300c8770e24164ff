import re
from datetime import date, datetime, time

# "HH:MM", 00:00 through 23:59
HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

def parse_hhmm(value: str) -> time:
    """
    Parse an "HH:MM" string into a time.

    Raises ValueError for anything else, including "24:00" and "9:00".
    """
    match = HHMM_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return time(int(match.group(1)), int(match.group(2)))

def day_of_week_number(target_date: date) -> int:
    """Weekday number with 0 = Sunday ... 6 = Saturday."""
    # date.weekday() is 0 = Monday
    return (target_date.weekday() + 1) % 7

def day_number_from_name(name: str) -> int:
    lowered = name.strip().lower()
    for index, day_name in enumerate(DAY_NAMES):
        if day_name.lower() == lowered:
            return index
    raise ValueError(f"Invalid day '{name}'")

def parse_date(value: str) -> date:
    """Strict YYYY-MM-DD parsing."""
    return datetime.strptime(value, "%Y-%m-%d").date()
