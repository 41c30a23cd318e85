"""Session duration and time-slot helpers."""

from datetime import datetime, timedelta
from typing import Optional

SESSION_DURATIONS = {
    "default": 60,
    "consultation": 45,
    "assessment": 60,
    "personal": 60,
    "group": 75,
    "class": 90,
    "rehabilitation": 60,
}

DURATION_OPTIONS = (15, 30, 45, 60, 75, 90, 120, 150, 180)

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 480


def get_default_duration_by_type(session_type: Optional[str] = None) -> int:
    return SESSION_DURATIONS.get(session_type or "default", SESSION_DURATIONS["default"])


def calculate_session_end_time(start: datetime, duration_minutes: int) -> datetime:
    return start + timedelta(minutes=duration_minutes)


def calculate_duration_between(start: Optional[datetime], end: Optional[datetime]) -> int:
    if start is None or end is None:
        return SESSION_DURATIONS["default"]
    minutes = round((end - start).total_seconds() / 60)
    return max(minutes, MIN_DURATION_MINUTES)


def format_duration_to_string(duration_minutes: int) -> str:
    if duration_minutes < 60:
        return f"{duration_minutes} minutes"
    hours, minutes = divmod(duration_minutes, 60)
    hour_text = "1 hour" if hours == 1 else f"{hours} hours"
    if minutes == 0:
        return hour_text
    return f"{hour_text} {minutes} minutes"


def get_available_duration_options() -> list[dict]:
    return [{"value": minutes, "label": format_duration_to_string(minutes)} for minutes in DURATION_OPTIONS]


def validate_session_duration(duration: int) -> tuple[bool, Optional[str]]:
    if duration < MIN_DURATION_MINUTES:
        return False, "Duration must be at least 15 minutes"
    if duration > MAX_DURATION_MINUTES:
        return False, "Duration cannot exceed 8 hours"
    return True, None


def generate_time_slots(start_hour: int = 9, end_hour: int = 22, interval_minutes: int = 30) -> list[dict]:
    slots = []
    for hour in range(start_hour, end_hour):
        for minute in range(0, 60, interval_minutes):
            label = f"{hour:02d}:{minute:02d}"
            slots.append({"value": label, "label": label, "hour": hour, "minute": minute})
    return slots


def do_sessions_overlap(
    first_start: datetime,
    first_duration: int,
    second_start: datetime,
    second_duration: int,
    buffer_minutes: int = 0,
) -> bool:
    first_end = calculate_session_end_time(first_start, first_duration + buffer_minutes)
    second_end = calculate_session_end_time(second_start, second_duration + buffer_minutes)
    return (first_start <= second_start < first_end) or (second_start <= first_start < second_end)
