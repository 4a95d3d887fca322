"""Read-only appointment statistics for the admin dashboard"""

import logging
from collections import Counter
from datetime import date, datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...auth import Principal, require_admin
from ...models import APPOINTMENT_STATUSES
from . import state_machine
from .repository import AppointmentRepository

logger = logging.getLogger(__name__)


def _shift_month(first_of_month: date, months: int) -> date:
    index = first_of_month.year * 12 + (first_of_month.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


class AppointmentStatsService:
    """Derived views over appointments; never writes"""

    def __init__(self, db: Session, now: Callable[[], datetime] = datetime.now):
        self.db = db
        self.now = now
        self.repo = AppointmentRepository()

    def counts_by_status(self, actor: Principal) -> dict:
        """Total number of appointments and a per-status breakdown"""
        require_admin(actor)
        counts = self.repo.count_by_status(self.db)
        status_counts = {status: counts.get(status, 0) for status in APPOINTMENT_STATUSES}
        return {
            "totalAppointments": sum(counts.values()),
            "statusCounts": status_counts,
        }

    def formula_popularity(self, actor: Principal, limit: int = 5) -> dict:
        """
        Most and least booked formulas.

        Only formulas booked at least once are ranked. Ties are broken by
        formula id so the ranking is stable.
        """
        require_admin(actor)
        rows = [
            {"formulaId": formula_id, "title": title, "count": count}
            for formula_id, title, count in self.repo.count_by_formula(self.db)
        ]
        most = sorted(rows, key=lambda r: (-r["count"], r["formulaId"]))[:limit]
        least = sorted(rows, key=lambda r: (r["count"], r["formulaId"]))[:limit]
        return {"mostReserved": most, "leastReserved": least}

    def monthly_trend(
        self,
        actor: Principal,
        status: Optional[str] = None,
        formula_id: Optional[int] = None,
        months: int = 3,
    ) -> list[dict]:
        """
        Appointment counts per month for the current month and the months
        before it, oldest first. Months without appointments report 0.
        """
        require_admin(actor)
        if status:
            state_machine.validate_status_value(status)

        today = self.now().date()
        current_month = today.replace(day=1)
        first_month = _shift_month(current_month, -(months - 1))

        dates = self.repo.get_dates_in_range(
            self.db, first_month, today, status=status, formula_id=formula_id
        )
        per_month = Counter((d.year, d.month) for d in dates)

        trend = []
        for offset in range(months):
            month = _shift_month(first_month, offset)
            trend.append({"month": month, "count": per_month.get((month.year, month.month), 0)})
        return trend
