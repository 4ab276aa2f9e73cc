"""
Counseling Records - Utility Functions

Time-of-day arithmetic and display helpers
"""

from typing import Tuple


def parse_time_of_day(value: str) -> Tuple[int, int]:
    """Split an "HH:MM" string into (hours, minutes)"""
    hours, minutes = value.split(":")
    return int(hours), int(minutes)


def minutes_since_midnight(value: str) -> int:
    hours, minutes = parse_time_of_day(value)
    return hours * 60 + minutes


def calculate_interaction_duration(start_time: str, end_time: str) -> int:
    """Minutes between two "HH:MM" times

    Negative when end_time precedes start_time. Callers must reject that
    value rather than store it.
    """
    return minutes_since_midnight(end_time) - minutes_since_midnight(start_time)


def calculate_end_time(start_time: str, duration_minutes: int) -> str:
    """Add a duration to an "HH:MM" start time"""
    total = minutes_since_midnight(start_time) + duration_minutes
    return f"{total // 60:02d}:{total % 60:02d}"


def format_minutes(minutes: int) -> str:
    """Format minutes as "1h 15m", or "45m" when under an hour"""
    hours = minutes // 60
    mins = minutes % 60
    return f"{hours}h {mins}m" if hours > 0 else f"{mins}m"
