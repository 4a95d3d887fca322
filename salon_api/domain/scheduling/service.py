"""Appointment service - Booking orchestration and status changes"""

import logging
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import Principal, require_admin
from ...errors import (
    AppError,
    AuthorizationError,
    ConflictError,
    FormatError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from ...models import Appointment
from ..formulas.repository import FormulaRepository
from . import state_machine
from .conflicts import SlotConflictChecker
from .repository import AppointmentRepository
from .schemas import AppointmentUpdate, StatusUpdate
from .time_calculator import is_valid_time, minutes_of_day, to_minutes

logger = logging.getLogger(__name__)


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session, now: Callable[[], datetime] = datetime.now):
        self.db = db
        self.now = now
        self.repo = AppointmentRepository()
        self.formulas = FormulaRepository()
        self.conflicts = SlotConflictChecker(db, self.repo)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _unit_of_work(self, *locked_days: date):
        """
        Run a write under the booking locks of the given dates.

        Any failure rolls the session back (releasing the locks); store errors
        surface as InternalError.
        """
        try:
            for day in sorted(set(locked_days)):
                self.repo.lock_day(self.db, day)
            yield
        except AppError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"❌ Database error while writing appointment: {e}")
            raise InternalError() from e

    def _get_or_404(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found.")
        return appointment

    @staticmethod
    def _require_time(value: Optional[str], field: str) -> str:
        if not is_valid_time(value):
            raise FormatError(f"{field} must be in HH:MM format.")
        return value

    # ------------------------------------------------------------------
    # creation
    # ------------------------------------------------------------------

    def create_appointment(
        self,
        actor: Principal,
        formula_id: Optional[int],
        day: Optional[date],
        start_time: Optional[str],
        end_time: Optional[str],
    ) -> Appointment:
        """Book a slot for the acting client; the appointment starts as pending"""
        logger.info(f"📥 Booking request from user {actor.user_id}: {day} {start_time}-{end_time}")

        if not formula_id or not day or not start_time or not end_time:
            raise ValidationError("Date, start time, end time and formula are required.")
        self._require_time(start_time, "Start time")
        self._require_time(end_time, "End time")

        if not self.formulas.get_by_id(self.db, formula_id):
            raise NotFoundError("Formula not found.")

        now = self.now()
        if day < now.date():
            raise ValidationError("The appointment date cannot be in the past.")
        if day == now.date() and to_minutes(start_time) <= minutes_of_day(now):
            raise ValidationError("The appointment start time must be in the future.")

        if to_minutes(end_time) <= to_minutes(start_time):
            raise ValidationError("The end time must be after the start time.")

        with self._unit_of_work(day):
            if self.conflicts.has_conflict(day, start_time, end_time):
                logger.warning(f"⚠️ Slot {day} {start_time}-{end_time} already booked")
                raise ConflictError()

            appointment = self.repo.create(
                self.db,
                client_id=actor.user_id,
                formula_id=formula_id,
                date=day,
                start_time=start_time,
                end_time=end_time,
                status=state_machine.INITIAL_STATUS,
            )

        logger.info(f"✅ Appointment {appointment.id} booked by user {actor.user_id} (pending)")
        return self._get_or_404(appointment.id)

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def cancel_appointment(
        self, actor: Principal, appointment_id: int, reason: Optional[str] = None
    ) -> Appointment:
        """Cancel on behalf of the owner or an admin, before the slot starts"""
        appointment = self._get_or_404(appointment_id)

        with self._unit_of_work():
            state_machine.cancel(appointment, actor, self.now(), reason)
            appointment = self.repo.save(self.db, appointment)

        return appointment

    def update_status(self, actor: Principal, appointment_id: int, data: StatusUpdate) -> Appointment:
        """Admin status change, optionally replacing the admin notes"""
        require_admin(actor)
        state_machine.validate_status_value(data.status)
        appointment = self._get_or_404(appointment_id)

        with self._unit_of_work():
            state_machine.admin_transition(appointment, actor, data.status)
            if "adminNotes" in data.model_fields_set:
                appointment.admin_notes = data.adminNotes
            appointment = self.repo.save(self.db, appointment)

        return appointment

    def update_appointment(
        self, actor: Principal, appointment_id: int, data: AppointmentUpdate
    ) -> Appointment:
        """
        Admin full edit. Only fields present in the payload are applied.

        Moving a live appointment to another date or time re-runs the conflict
        check (excluding the appointment itself) under the target date's lock.
        A status in the payload goes through the same transition rules as the
        status endpoint. A cancellation reason is only accepted when the
        appointment ends up cancelled.
        """
        require_admin(actor)
        appointment = self._get_or_404(appointment_id)
        fields = data.model_dump(exclude_unset=True)

        new_date = fields.get("date", appointment.date)
        if new_date is None:
            raise ValidationError("Date cannot be empty.")

        start_time = appointment.start_time
        if "startTime" in fields:
            start_time = self._require_time(fields["startTime"], "Start time")
        end_time = appointment.end_time
        if "endTime" in fields:
            end_time = self._require_time(fields["endTime"], "End time")
        if to_minutes(end_time) <= to_minutes(start_time):
            raise ValidationError("The end time must be after the start time.")

        formula_id = fields.get("formulaId")
        if "formulaId" in fields:
            if formula_id is None or not self.formulas.get_by_id(self.db, formula_id):
                raise NotFoundError("Formula not found.")

        new_status = fields.get("status")
        if new_status is not None and new_status != appointment.status:
            state_machine.validate_status_value(new_status)
            if not state_machine.validate_admin_transition(appointment.status, new_status):
                raise ValidationError(
                    f"Cannot change status from '{appointment.status}' to '{new_status}'."
                )
        else:
            new_status = None

        slot_changed = (new_date, start_time, end_time) != (
            appointment.date,
            appointment.start_time,
            appointment.end_time,
        )
        final_status = new_status or appointment.status
        if fields.get("cancellationReason") and final_status != "cancelled":
            raise ValidationError("A cancellation reason can only be set on a cancelled appointment.")
        recheck = slot_changed and final_status != "cancelled"

        with self._unit_of_work(*([new_date] if recheck else [])):
            if recheck and self.conflicts.has_conflict(
                new_date, start_time, end_time, exclude_appointment_id=appointment.id
            ):
                raise ConflictError()

            appointment.date = new_date
            appointment.start_time = start_time
            appointment.end_time = end_time
            if "formulaId" in fields:
                appointment.formula_id = formula_id
            if new_status:
                state_machine.admin_transition(appointment, actor, new_status)
            if "adminNotes" in fields:
                appointment.admin_notes = fields["adminNotes"]
            if "cancellationReason" in fields:
                appointment.cancellation_reason = fields["cancellationReason"]

            # Always record the admin who handled the edit
            appointment.processed_by_id = actor.user_id
            appointment = self.repo.save(self.db, appointment)

        logger.info(f"✅ Appointment {appointment.id} updated by admin {actor.user_id}: {sorted(fields)}")
        return self._get_or_404(appointment.id)

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def get_appointment(self, actor: Principal, appointment_id: int) -> Appointment:
        appointment = self._get_or_404(appointment_id)
        if appointment.client_id != actor.user_id and not actor.is_admin:
            raise AuthorizationError("Access denied. You are not allowed to view this appointment.")
        return appointment

    def list_my_appointments(self, actor: Principal) -> list[Appointment]:
        return self.repo.get_for_client(self.db, actor.user_id)

    def list_history(self, actor: Principal) -> list[Appointment]:
        """Completed appointments of the acting client, most recent first"""
        return self.repo.get_history(self.db, actor.user_id)

    def list_upcoming(self, actor: Principal, days_ahead: int = 2) -> list[Appointment]:
        """Live appointments from today through today + days_ahead"""
        require_admin(actor)

        today = self.now().date()
        return self.repo.get_in_range(self.db, today, today + timedelta(days=days_ahead))

    def list_all(
        self,
        actor: Principal,
        status: Optional[str] = None,
        day: Optional[date] = None,
        client_id: Optional[int] = None,
    ) -> list[Appointment]:
        require_admin(actor)
        if status:
            state_machine.validate_status_value(status)
        return self.repo.search(self.db, status=status, day=day, client_id=client_id)
