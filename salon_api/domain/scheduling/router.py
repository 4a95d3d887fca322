"""Appointment router - FastAPI endpoints for booking and appointment management"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import Principal, get_clock, get_current_principal
from ...database import get_db
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentUpdate,
    CancelRequest,
    StatusUpdate,
)
from .service import AppointmentService
from .stats_service import AppointmentStatsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(
    db: Session = Depends(get_db), clock: Callable[[], datetime] = Depends(get_clock)
) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db, now=clock)


def get_stats_service(
    db: Session = Depends(get_db), clock: Callable[[], datetime] = Depends(get_clock)
) -> AppointmentStatsService:
    return AppointmentStatsService(db, now=clock)


def _envelope(message: str, data) -> dict:
    return {"success": True, "message": message, "data": data}


def _many(appointments) -> list[AppointmentResponse]:
    return [AppointmentResponse.from_model(a) for a in appointments]


# ============================================================================
# CLIENT ROUTES
# ============================================================================


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_appointment(
    data: AppointmentCreate,
    actor: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book a slot; the appointment waits for confirmation"""
    appointment = service.create_appointment(
        actor, data.formulaId, data.date, data.startTime, data.endTime
    )
    return _envelope(
        "Appointment booked. Awaiting confirmation.", AppointmentResponse.from_model(appointment)
    )


@router.get("/my")
async def get_my_appointments(
    actor: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    return _envelope("Your appointments were retrieved.", _many(service.list_my_appointments(actor)))


@router.get("/history")
async def get_history(
    actor: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Completed appointments of the current client"""
    return _envelope("Your treatment history was retrieved.", _many(service.list_history(actor)))


# ============================================================================
# ADMIN ROUTES
# ============================================================================


@router.get("/upcoming")
async def get_upcoming(
    actor: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Live appointments for today and the next two days"""
    return _envelope("Upcoming appointments retrieved.", _many(service.list_upcoming(actor)))


@router.get("/admin")
async def get_all_appointments(
    status_filter: Optional[str] = Query(None, alias="status"),
    day: Optional[date] = Query(None, alias="date"),
    client: Optional[int] = Query(None),
    actor: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointments = service.list_all(actor, status=status_filter, day=day, client_id=client)
    return _envelope("Appointments retrieved.", _many(appointments))


@router.get("/stats/counts-by-status")
async def get_counts_by_status(
    actor: Principal = Depends(get_current_principal),
    stats: AppointmentStatsService = Depends(get_stats_service),
):
    return _envelope("Appointment statistics retrieved.", stats.counts_by_status(actor))


@router.get("/stats/formula-popularity")
async def get_formula_popularity(
    actor: Principal = Depends(get_current_principal),
    stats: AppointmentStatsService = Depends(get_stats_service),
):
    return _envelope("Formula popularity retrieved.", stats.formula_popularity(actor))


@router.get("/stats/monthly-trend")
async def get_monthly_trend(
    status_filter: Optional[str] = Query(None, alias="status"),
    formula_id: Optional[int] = Query(None, alias="formulaId"),
    actor: Principal = Depends(get_current_principal),
    stats: AppointmentStatsService = Depends(get_stats_service),
):
    trend = stats.monthly_trend(actor, status=status_filter, formula_id=formula_id)
    return _envelope("Monthly appointment trend retrieved.", trend)


# ============================================================================
# SINGLE APPOINTMENT ROUTES
# ============================================================================


@router.get("/{appointment_id}")
async def get_appointment(
    appointment_id: int,
    actor: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Owner or admin only"""
    appointment = service.get_appointment(actor, appointment_id)
    return _envelope("Appointment retrieved.", AppointmentResponse.from_model(appointment))


@router.put("/{appointment_id}/cancel")
async def cancel_appointment(
    appointment_id: int,
    data: Optional[CancelRequest] = Body(None),
    actor: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    reason = data.cancellationReason if data else None
    appointment = service.cancel_appointment(actor, appointment_id, reason)
    return _envelope("Appointment cancelled.", AppointmentResponse.from_model(appointment))


@router.put("/{appointment_id}/status")
async def update_appointment_status(
    appointment_id: int,
    data: StatusUpdate,
    actor: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.update_status(actor, appointment_id, data)
    return _envelope(
        f"Appointment status updated to '{appointment.status}'.",
        AppointmentResponse.from_model(appointment),
    )


@router.put("/{appointment_id}")
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    actor: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Admin full edit"""
    appointment = service.update_appointment(actor, appointment_id, data)
    return _envelope("Appointment updated.", AppointmentResponse.from_model(appointment))
