"""Search, filter, sort and paginate the doctor catalog.

Every function takes a list of doctor dicts (with ``available_slots`` already
computed) and returns a new list; the input records are never modified.
"""
import math
from datetime import datetime, timedelta
from typing import List, Optional

from constants.scheduling import DEFAULT_PAGE_SIZE
from utils.dateparse import utcnow


def matches_search(doctor: dict, term: str) -> bool:
    term = term.lower()
    return any(
        term in (doctor.get(field) or "").lower()
        for field in ("name", "specialty", "bio")
    )


def has_slot_on(doctor: dict, day) -> bool:
    if "open_days" in doctor:
        return day in doctor["open_days"]
    return any(slot.date() == day for slot in doctor.get("available_slots") or [])


def filter_doctors(
    doctors: List[dict],
    search: Optional[str] = None,
    specialty: Optional[str] = None,
    availability: Optional[str] = None,
    available_only: bool = False,
    now: Optional[datetime] = None,
) -> List[dict]:
    results = list(doctors)

    if search and search.strip():
        results = [d for d in results if matches_search(d, search.strip())]

    if specialty and specialty.lower() != "all":
        results = [d for d in results if d.get("specialty") == specialty]

    if availability in ("today", "tomorrow"):
        day = (now or utcnow()).date()
        if availability == "tomorrow":
            day += timedelta(days=1)
        results = [d for d in results if has_slot_on(d, day)]

    if available_only:
        results = [d for d in results if d.get("available_slots")]

    return results


def recommended_score(doctor: dict) -> float:
    return doctor.get("rating", 0) * 10 + doctor.get("experience", 0) * 0.5


def _availability_key(doctor: dict):
    slots = doctor.get("available_slots") or []
    # doctors with nothing open go to the end
    return (0, slots[0]) if slots else (1, datetime.max)


def sort_doctors(doctors: List[dict], sort: Optional[str] = "relevance") -> List[dict]:
    if sort == "rating":
        return sorted(doctors, key=lambda d: d.get("rating", 0), reverse=True)
    if sort == "experience":
        return sorted(doctors, key=lambda d: d.get("experience", 0), reverse=True)
    if sort == "name":
        return sorted(doctors, key=lambda d: (d.get("name") or "").lower())
    if sort == "availability":
        return sorted(doctors, key=_availability_key)
    if sort == "recommended":
        return sorted(doctors, key=recommended_score, reverse=True)
    # relevance: keep catalog order
    return list(doctors)


def paginate(items: List[dict], page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> dict:
    total = len(items)
    start = (page - 1) * limit
    return {
        "data": items[start:start + limit],
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


def query_doctors(doctors: List[dict], query, now: Optional[datetime] = None) -> dict:
    """Apply a ``DoctorQuery`` end to end and return one page."""
    filtered = filter_doctors(
        doctors,
        search=query.search,
        specialty=query.specialty,
        availability=query.availability,
        available_only=bool(query.available),
        now=now,
    )
    return paginate(sort_doctors(filtered, query.sort), query.page, query.limit)
