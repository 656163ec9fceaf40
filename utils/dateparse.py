from dateparser import parse as dateparse
from datetime import datetime, timezone
import logging

logger = logging.getLogger("utils.dateparse")


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the way Mongo hands datetimes back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_datetime(raw_time: str, now: datetime = None) -> datetime:
    """
    Parse an ISO or natural language datetime string ("next monday 10am")
    into a naive UTC datetime. Past times are rejected.
    """
    dt = dateparse(
        raw_time,
        settings={
            "PREFER_DATES_FROM": "future",
            "RETURN_AS_TIMEZONE_AWARE": True,
            "TIMEZONE": "UTC",
            "TO_TIMEZONE": "UTC",
        },
    )

    if not dt:
        logger.error("Cannot parse appointment time", extra={"raw_time": raw_time})
        raise ValueError(f"Cannot parse appointment time: {raw_time}")

    now = (now or utcnow()).replace(second=0, microsecond=0)
    dt = to_naive_utc(dt).replace(second=0, microsecond=0)

    if dt < now:
        logger.warning("Invalid past appointment time", extra={"raw_time": raw_time})
        raise ValueError(f"Invalid appointment time: {raw_time}. Past dates are not allowed.")

    return dt
