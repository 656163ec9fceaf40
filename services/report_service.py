from motor.motor_asyncio import AsyncIOMotorDatabase
from collections import Counter, defaultdict
from datetime import date, datetime, timedelta
import logging

from constants.status import APPOINTMENT_STATUS
from services.doctor_service import DoctorService
from utils.dateparse import utcnow

logger = logging.getLogger(__name__)


class ReportService:
    """Numbers for the admin dashboard."""

    @staticmethod
    async def appointment_stats(db: AsyncIOMotorDatabase, now: datetime = None) -> dict:
        now = now or utcnow()
        appointments = await db.appointments.find(
            {}, {"status": 1, "date_time": 1, "doctor.specialty": 1}
        ).to_list(length=None)

        today = now.date()
        by_status = Counter(a["status"] for a in appointments)
        by_specialty = Counter(a.get("doctor", {}).get("specialty", "Unknown") for a in appointments)

        doctors = await DoctorService.with_upcoming_slots(db, await DoctorService.all_doctors(db), now)
        return {
            "total_appointments": len(appointments),
            "today_appointments": sum(1 for a in appointments if a["date_time"].date() == today),
            "by_status": dict(by_status),
            "by_specialty": dict(by_specialty),
            "total_doctors": len(doctors),
            "available_doctors": sum(1 for d in doctors if d["available_slots"]),
        }

    @staticmethod
    async def revenue(db: AsyncIOMotorDatabase, start: date = None, end: date = None) -> dict:
        """Fees of completed appointments per day for [start, end]; defaults to the last 30 days."""
        end = end or utcnow().date()
        start = start or end - timedelta(days=30)
        if start > end:
            raise ValueError("start must not be after end")

        cursor = db.appointments.find(
            {
                "status": APPOINTMENT_STATUS["COMPLETED"],
                "date_time": {
                    "$gte": datetime.combine(start, datetime.min.time()),
                    "$lt": datetime.combine(end + timedelta(days=1), datetime.min.time()),
                },
            },
            {"date_time": 1, "fee": 1},
        )
        per_day = defaultdict(lambda: {"appointments": 0, "revenue": 0.0})
        for appt in await cursor.to_list(length=None):
            bucket = per_day[appt["date_time"].date()]
            bucket["appointments"] += 1
            bucket["revenue"] += float(appt.get("fee") or 0)

        days = [{"day": day, **per_day[day]} for day in sorted(per_day)]
        return {
            "start": start,
            "end": end,
            "total_revenue": round(sum(d["revenue"] for d in days), 2),
            "completed_appointments": sum(d["appointments"] for d in days),
            "days": days,
        }
