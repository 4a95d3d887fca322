"""
Booking status transitions

Statuses: pending → confirmed → in_progress → completed, with cancellation
possible from any non-terminal status.

Note:
- Clients may only cancel their own appointments, and only before they start
- Admins may move a non-terminal appointment to any status except pending
- 'completed' and 'cancelled' are terminal
"""

import logging
from datetime import datetime
from typing import Optional

from ...auth import Principal, require_admin
from ...errors import AuthorizationError, ValidationError
from ...models import APPOINTMENT_STATUSES, Appointment
from .time_calculator import start_instant

logger = logging.getLogger(__name__)

INITIAL_STATUS = "pending"
TERMINAL_STATUSES = frozenset({"cancelled", "completed"})
CANCELLABLE_STATUSES = frozenset({"pending", "confirmed", "in_progress"})

# Valid admin-driven transitions
ADMIN_TRANSITIONS = {
    "pending": ["confirmed", "in_progress", "completed", "cancelled"],
    "confirmed": ["confirmed", "in_progress", "completed", "cancelled"],
    "in_progress": ["confirmed", "in_progress", "completed", "cancelled"],
    "completed": [],  # Terminal state
    "cancelled": [],  # Terminal state
}


def validate_status_value(status: Optional[str]) -> str:
    if status not in APPOINTMENT_STATUSES:
        raise ValidationError("Invalid status provided.")
    return status


def validate_admin_transition(current_status: str, new_status: str) -> bool:
    """True when an admin may move an appointment from current_status to new_status"""
    return new_status in ADMIN_TRANSITIONS.get(current_status, [])


def ensure_can_cancel(appointment: Appointment, actor: Principal, now: datetime) -> None:
    """
    Raise unless actor may cancel the appointment at instant now.

    Raises:
        AuthorizationError: actor is neither the owner nor an admin
        ValidationError: the appointment already started, or is terminal
    """
    if appointment.client_id != actor.user_id and not actor.is_admin:
        raise AuthorizationError("Access denied. You are not allowed to cancel this appointment.")

    if start_instant(appointment.date, appointment.start_time) <= now:
        raise ValidationError("Cannot cancel an appointment that has already started or passed.")

    if appointment.status not in CANCELLABLE_STATUSES:
        raise ValidationError("This appointment is already cancelled or completed.")


def cancel(
    appointment: Appointment, actor: Principal, now: datetime, reason: Optional[str] = None
) -> Appointment:
    """Move an appointment to cancelled on behalf of its owner or an admin"""
    ensure_can_cancel(appointment, actor, now)

    previous = appointment.status
    appointment.status = "cancelled"
    if reason:
        appointment.cancellation_reason = reason
    if actor.is_admin:
        appointment.processed_by_id = actor.user_id

    logger.info(f"✅ Appointment {appointment.id} transitioned: {previous} → cancelled (by user {actor.user_id})")
    return appointment


def admin_transition(appointment: Appointment, actor: Principal, new_status: str) -> Appointment:
    """Apply an admin-initiated status change"""
    require_admin(actor)
    validate_status_value(new_status)

    previous = appointment.status
    if not validate_admin_transition(previous, new_status):
        raise ValidationError(f"Cannot change status from '{previous}' to '{new_status}'.")

    appointment.status = new_status
    appointment.processed_by_id = actor.user_id

    logger.info(f"✅ Appointment {appointment.id} transitioned: {previous} → {new_status} (admin {actor.user_id})")
    return appointment
