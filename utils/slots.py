"""Slot grid arithmetic for a doctor's working schedule.

A doctor document carries ``working_days`` (0=Mon..6=Sun), ``start_time`` and
``end_time`` ("HH:MM") and ``slot_minutes``. A slot is open when it lies on
that grid, is in the future and is not held by an active appointment.
"""
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Set

from constants.scheduling import (
    DEFAULT_END_TIME,
    DEFAULT_SLOT_MINUTES,
    DEFAULT_START_TIME,
    DEFAULT_WORKING_DAYS,
    SLOT_HORIZON_DAYS,
    UPCOMING_SLOT_COUNT,
)


def _parse_hhmm(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def schedule_of(doctor: dict) -> dict:
    # an empty list means the doctor takes no bookings
    working_days = doctor.get("working_days")
    return {
        "working_days": DEFAULT_WORKING_DAYS if working_days is None else working_days,
        "start": _parse_hhmm(doctor.get("start_time") or DEFAULT_START_TIME),
        "end": _parse_hhmm(doctor.get("end_time") or DEFAULT_END_TIME),
        "slot_minutes": doctor.get("slot_minutes") or DEFAULT_SLOT_MINUTES,
    }


def day_slots(doctor: dict, day: date) -> List[datetime]:
    """Every slot start on the grid for one day, booked or not."""
    schedule = schedule_of(doctor)
    if day.weekday() not in schedule["working_days"]:
        return []

    step = timedelta(minutes=schedule["slot_minutes"])
    current = datetime.combine(day, schedule["start"])
    end = datetime.combine(day, schedule["end"])
    slots = []
    # the last slot has to finish by closing time
    while current + step <= end:
        slots.append(current)
        current += step
    return slots


def is_on_grid(doctor: dict, when: datetime) -> bool:
    return when.replace(second=0, microsecond=0) == when and when in day_slots(doctor, when.date())


def open_slots(
    doctor: dict,
    day: date,
    booked: Iterable[datetime],
    now: datetime,
) -> List[datetime]:
    taken: Set[datetime] = set(booked)
    return [slot for slot in day_slots(doctor, day) if slot > now and slot not in taken]


def upcoming_slots(
    doctor: dict,
    booked: Iterable[datetime],
    now: datetime,
    count: int = UPCOMING_SLOT_COUNT,
    horizon_days: int = SLOT_HORIZON_DAYS,
) -> List[datetime]:
    """The next ``count`` open slots from ``now`` within ``horizon_days`` days."""
    taken = set(booked)
    found: List[datetime] = []
    for offset in range(horizon_days):
        found.extend(open_slots(doctor, now.date() + timedelta(days=offset), taken, now))
        if len(found) >= count:
            break
    return found[:count]


def first_slot(slots: List[datetime]) -> Optional[datetime]:
    return slots[0] if slots else None


def open_days(
    doctor: dict,
    booked: Iterable[datetime],
    now: datetime,
    horizon_days: int = SLOT_HORIZON_DAYS,
) -> List[date]:
    """Days within the horizon that still have at least one open slot."""
    taken = set(booked)
    days = (now.date() + timedelta(days=offset) for offset in range(horizon_days))
    return [day for day in days if open_slots(doctor, day, taken, now)]
