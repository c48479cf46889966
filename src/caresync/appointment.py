"""
Appointment rules.

Appointments are stored with a day-first date label ("26/10/2025") and a
12-hour time label ("10:30 AM"). This module parses those labels and answers
the scheduling questions the booking and cancellation flows ask:

- can the patient still cancel (at least 24 hours ahead)?
- is a picked time inside clinic hours?
- does the doctor still have capacity for a date?

All datetimes are naive and in local time, like the stored labels.
"""

import logging
import re
import typing
from datetime import datetime, timedelta
from enum import Enum

from . import config

_MERIDIEMS = {"AM", "PM"}
_INTEGER = re.compile(r"^[+-]?\d+$")


class AppointmentStatus(Enum):
    BOOKED = "Booked"
    CHECKED = "Checked"
    MISSED = "Missed"

    @classmethod
    def from_label(cls, label: str) -> "AppointmentStatus":
        key = str(label).strip().lower()
        mapping = {
            "booked": cls.BOOKED,
            "checked": cls.CHECKED,
            "missed": cls.MISSED,
        }
        try:
            return mapping[key]
        except KeyError:
            raise ValueError(f"Unknown appointment status label: {label!r}")


def _to_int(text: str) -> int:
    text = text.strip()
    if not _INTEGER.match(text):
        raise ValueError(f"Not an integer: {text!r}")
    return int(text)


def parse_date_label(date_str: str) -> tuple[int, int, int]:
    """'26/10/2025' -> (26, 10, 2025). Month stays 1-based."""
    parts = str(date_str).split("/")
    if len(parts) != 3:
        raise ValueError(f"Invalid appointment date: {date_str!r}")
    day, month, year = (_to_int(part) for part in parts)
    return day, month, year


def parse_time_label(time_str: str) -> tuple[int, int]:
    """
    '10:30 AM' -> (10, 30); '12:05 AM' -> (0, 5); '02:45 PM' -> (14, 45).
    Returns the 24-hour (hour, minute).
    """
    parts = str(time_str).strip().split()
    if len(parts) != 2:
        raise ValueError(f"Invalid appointment time: {time_str!r}")
    clock, meridiem = parts
    hour_minute = clock.split(":")
    if len(hour_minute) != 2:
        raise ValueError(f"Invalid appointment time: {time_str!r}")
    hour = _to_int(hour_minute[0])
    minute = _to_int(hour_minute[1])
    meridiem = meridiem.upper()
    if meridiem not in _MERIDIEMS:
        raise ValueError(f"Invalid AM/PM marker in appointment time: {time_str!r}")

    if meridiem == "PM" and hour != 12:
        hour += 12
    elif meridiem == "AM" and hour == 12:
        hour = 0
    return hour, minute


def parse_appointment_datetime(date_str: str, time_str: str) -> datetime:
    """
    Combine the stored date and time labels into a local datetime.
    Raises ValueError on malformed labels or impossible dates (e.g. 31/02).
    """
    day, month, year = parse_date_label(date_str)
    hour, minute = parse_time_label(time_str)
    return datetime(year, month, day, hour, minute)


def can_cancel_appointment(
    date_str: str,
    time_str: str,
    now: typing.Optional[datetime] = None,
) -> bool:
    """
    True iff the appointment starts at least 24 hours after `now`.

    `now` defaults to the current local time, read once per call; an aware
    `now` is converted to local wall-clock time. Any parse problem returns
    False: an appointment we cannot read cannot be cancelled.

    Labels are strict: impossible dates ("31/02/2025") and hours outside
    1..12 ("13:30 PM") are not rolled over and return False.
    """
    try:
        appointment_at = parse_appointment_datetime(date_str, time_str)
    except (ValueError, TypeError, OverflowError) as e:
        logging.debug(f"Cannot cancel appointment {date_str!r} {time_str!r}: {e}")
        return False

    return appointment_at - _local_now(now) >= timedelta(hours=config.CANCELLATION_LEAD_HOURS)


def _local_now(now: typing.Optional[datetime]) -> datetime:
    """Naive local time, matching the stored labels."""
    if now is None:
        return datetime.now()
    if now.tzinfo is not None:
        return now.astimezone().replace(tzinfo=None)
    return now


def hours_until(date_str: str, time_str: str, now: typing.Optional[datetime] = None) -> float:
    """Hours from `now` to the appointment (negative if it already started)."""
    appointment_at = parse_appointment_datetime(date_str, time_str)
    return (appointment_at - _local_now(now)) / timedelta(hours=1)


def is_within_clinic_hours(time_str: str) -> bool:
    """Clinic books from 09:00 through 21:59; malformed labels are outside."""
    try:
        hour, minute = parse_time_label(time_str)
    except ValueError:
        return False
    return config.CLINIC_FIRST_HOUR <= hour <= config.CLINIC_LAST_HOUR and 0 <= minute <= 59


def format_time_label(hour: int, minute: int) -> str:
    """24-hour clock -> stored label: (0, 5) -> '12:05 AM', (13, 0) -> '01:00 PM'."""
    meridiem = "PM" if hour >= 12 else "AM"
    if hour > 12:
        display_hour = hour - 12
    elif hour == 0:
        display_hour = 12
    else:
        display_hour = hour
    return f"{display_hour:02d}:{minute:02d} {meridiem}"


def format_date_label(day: int, month: int, year: int) -> str:
    """Stored date label, day first with no zero padding: '5/3/2026'."""
    return f"{day}/{month}/{year}"


def parse_capacity(raw: typing.Any) -> int:
    """
    A doctor's patient capacity may be stored as a number or a string.
    Anything unusable falls back to the configured default.
    """
    if isinstance(raw, bool):
        return config.default_capacity()
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        try:
            return _to_int(raw)
        except ValueError:
            pass
    return config.default_capacity()


def has_capacity(current_count: int, capacity: typing.Any = None) -> bool:
    """Booking is allowed while the booked count is below the doctor's capacity."""
    return current_count < parse_capacity(capacity)
