"""
Calculs sur les horaires HH:MM / HH:MM time-of-day helpers.
"""

import re
from datetime import date

from carrental.models.availability import WEEKDAYS, Weekday

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def is_valid_hhmm(value: str | None) -> bool:
    """Format HH:MM sur 24h / 24-hour HH:MM format."""
    return bool(value) and HHMM_PATTERN.match(value) is not None


def to_minutes(time_str: str) -> int:
    """Minutes depuis minuit / Minutes since midnight."""
    hours, mins = map(int, time_str.split(":"))
    return hours * 60 + mins


def is_same_day_range(time_from: str, time_to: str) -> bool:
    """`to` strictement après `from`, même journée / `to` strictly after `from`, same day."""
    return to_minutes(time_to) > to_minutes(time_from)


def weekday_of(day: date) -> Weekday:
    """Jour de la semaine d'une date / Weekday of a calendar date."""
    return WEEKDAYS[day.weekday()]
