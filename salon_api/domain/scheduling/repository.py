"""Appointment repository - Database operations for appointments"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, BookingDayLock, Formula

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("pending", "confirmed", "in_progress")

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def _with_relations(query):
        return query.options(
            joinedload(Appointment.client),
            joinedload(Appointment.formula),
            joinedload(Appointment.processed_by),
        )

    @staticmethod
    def get_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        """Get an appointment with its client, formula and processing admin"""
        query = db.query(Appointment).filter(Appointment.id == appointment_id)
        return AppointmentRepository._with_relations(query).first()

    @staticmethod
    def get_for_client(db: Session, client_id: int) -> list[Appointment]:
        """All appointments booked by a client, soonest first"""
        query = db.query(Appointment).filter(Appointment.client_id == client_id)
        return (
            AppointmentRepository._with_relations(query)
            .order_by(Appointment.date.asc(), Appointment.start_time.asc())
            .all()
        )

    @staticmethod
    def get_history(db: Session, client_id: int) -> list[Appointment]:
        """Completed appointments for a client, most recent first"""
        query = db.query(Appointment).filter(
            Appointment.client_id == client_id, Appointment.status == "completed"
        )
        return (
            AppointmentRepository._with_relations(query)
            .order_by(Appointment.date.desc(), Appointment.start_time.desc())
            .all()
        )

    @staticmethod
    def get_in_range(
        db: Session, start_date: date, end_date: date, statuses: tuple[str, ...] = ACTIVE_STATUSES
    ) -> list[Appointment]:
        """Appointments dated within [start_date, end_date] with one of the given statuses"""
        query = db.query(Appointment).filter(
            Appointment.date >= start_date,
            Appointment.date <= end_date,
            Appointment.status.in_(statuses),
        )
        return (
            AppointmentRepository._with_relations(query)
            .order_by(Appointment.date.asc(), Appointment.start_time.asc())
            .all()
        )

    @staticmethod
    def search(
        db: Session,
        status: Optional[str] = None,
        day: Optional[date] = None,
        client_id: Optional[int] = None,
    ) -> list[Appointment]:
        """Admin listing with optional filters"""
        query = db.query(Appointment)

        if status:
            query = query.filter(Appointment.status == status)
        if day:
            query = query.filter(Appointment.date == day)
        if client_id:
            query = query.filter(Appointment.client_id == client_id)

        return (
            AppointmentRepository._with_relations(query)
            .order_by(Appointment.date.asc(), Appointment.start_time.asc())
            .all()
        )

    @staticmethod
    def get_conflict_candidates(
        db: Session, day: date, exclude_appointment_id: Optional[int] = None
    ) -> list[Appointment]:
        """Non-cancelled appointments on the same calendar date"""
        query = db.query(Appointment).filter(
            Appointment.date == day, Appointment.status != "cancelled"
        )
        if exclude_appointment_id is not None:
            query = query.filter(Appointment.id != exclude_appointment_id)
        return query.order_by(Appointment.start_time.asc()).all()

    @staticmethod
    def lock_day(db: Session, day: date) -> BookingDayLock:
        """
        Take the booking lock for a calendar date.

        The row is created on first use, then selected FOR UPDATE. The lock is
        held until the surrounding transaction commits or rolls back.
        """
        insert = _UPSERT_DIALECTS.get(db.get_bind().dialect.name)
        if insert is not None:
            db.execute(insert(BookingDayLock).values(day=day).on_conflict_do_nothing())
        elif db.get(BookingDayLock, day) is None:
            db.add(BookingDayLock(day=day))
            db.flush()

        return (
            db.query(BookingDayLock)
            .filter(BookingDayLock.day == day)
            .with_for_update()
            .one()
        )

    @staticmethod
    def create(db: Session, **appointment_data) -> Appointment:
        """Create a new appointment"""
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def save(db: Session, appointment: Appointment) -> Appointment:
        """Persist pending changes on an appointment"""
        db.commit()
        db.refresh(appointment)
        return appointment

    # Aggregates
    @staticmethod
    def count_by_status(db: Session) -> dict[str, int]:
        rows = (
            db.query(Appointment.status, func.count(Appointment.id))
            .group_by(Appointment.status)
            .all()
        )
        return {status: count for status, count in rows}

    @staticmethod
    def count_by_formula(db: Session) -> list[tuple[int, str, int]]:
        """(formula_id, title, count) for every formula booked at least once"""
        return (
            db.query(Formula.id, Formula.title, func.count(Appointment.id))
            .join(Appointment, Appointment.formula_id == Formula.id)
            .group_by(Formula.id, Formula.title)
            .all()
        )

    @staticmethod
    def get_dates_in_range(
        db: Session,
        start_date: date,
        end_date: date,
        status: Optional[str] = None,
        formula_id: Optional[int] = None,
    ) -> list[date]:
        """Appointment dates within [start_date, end_date], one entry per appointment"""
        query = db.query(Appointment.date).filter(
            Appointment.date >= start_date, Appointment.date <= end_date
        )
        if status:
            query = query.filter(Appointment.status == status)
        if formula_id:
            query = query.filter(Appointment.formula_id == formula_id)
        return [row[0] for row in query.all()]
