"""Slot conflict detection for appointments"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment
from .repository import AppointmentRepository
from .time_calculator import to_minutes

logger = logging.getLogger(__name__)


def slots_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval overlap: [a_start, a_end) and [b_start, b_end) intersect"""
    return a_start < b_end and b_start < a_end


class SlotConflictChecker:
    """Checks a proposed slot against the non-cancelled appointments of its date"""

    def __init__(self, db: Session, repo: Optional[AppointmentRepository] = None):
        self.db = db
        self.repo = repo or AppointmentRepository()

    def find_conflict(
        self,
        day: date,
        start_time: str,
        end_time: str,
        exclude_appointment_id: Optional[int] = None,
    ) -> Optional[Appointment]:
        """First appointment overlapping the slot, or None"""
        start = to_minutes(start_time)
        end = to_minutes(end_time)

        for existing in self.repo.get_conflict_candidates(self.db, day, exclude_appointment_id):
            if slots_overlap(start, end, to_minutes(existing.start_time), to_minutes(existing.end_time)):
                return existing
        return None

    def has_conflict(
        self,
        day: date,
        start_time: str,
        end_time: str,
        exclude_appointment_id: Optional[int] = None,
    ) -> bool:
        conflict = self.find_conflict(day, start_time, end_time, exclude_appointment_id)
        if conflict:
            logger.info(
                f"⛔ Slot {day} {start_time}-{end_time} overlaps appointment {conflict.id} "
                f"({conflict.start_time}-{conflict.end_time}, {conflict.status})"
            )
        return conflict is not None
