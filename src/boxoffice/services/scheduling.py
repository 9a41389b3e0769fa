"""
Scheduling rules and the nearby-show window.

All comparisons are made on absolute instants: aware datetimes compare by
UTC instant regardless of the offset they carry.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from boxoffice.exceptions import InvalidArgumentError

NEARBY_WINDOW = timedelta(hours=48)


def require_aware(field: str, value: datetime) -> datetime:
    """
    Reject naive datetimes.

    Raises:
        InvalidArgumentError: On ``field``
    """
    if not isinstance(value, datetime):
        raise InvalidArgumentError(field, "Must be a date and time")
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidArgumentError(field, "Must include a timezone offset")
    return value


def check_future_start(start_time: datetime, now: datetime) -> None:
    """
    A show must start strictly after ``now``.

    Raises:
        InvalidArgumentError: On ``start_time``
    """
    require_aware("start_time", start_time)
    if start_time <= now:
        raise InvalidArgumentError("start_time", "Start time must be in the future")


def window_bounds(reference_time: datetime, window: timedelta = NEARBY_WINDOW) -> tuple[datetime, datetime]:
    """Closed interval ``[reference - window, reference + window]``."""
    return reference_time - window, reference_time + window


def describe_window(window: timedelta) -> str:
    hours = window.total_seconds() / 3600
    if hours.is_integer():
        return f"{int(hours)} hours"
    return f"{hours:g} hours"


def nearby_message(count: int, window: timedelta = NEARBY_WINDOW) -> str:
    """
    Summary line for a nearby-shows result.

    Example:
        >>> nearby_message(0)
        'No other shows scheduled at this venue within 48 hours'
        >>> nearby_message(2)
        '2 show(s) found within 48 hours'
    """
    if count == 0:
        return f"No other shows scheduled at this venue within {describe_window(window)}"
    return f"{count} show(s) found within {describe_window(window)}"


__all__ = [
    "NEARBY_WINDOW",
    "check_future_start",
    "describe_window",
    "nearby_message",
    "require_aware",
    "window_bounds",
]
