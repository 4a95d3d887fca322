"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import date as Date
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ...models import Appointment, Formula, User


class AppointmentCreate(BaseModel):
    """Schema for a client booking request"""

    formulaId: Optional[int] = None
    date: Optional[Date] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None


class AppointmentUpdate(BaseModel):
    """Schema for the admin full edit; only fields present in the payload are applied"""

    date: Optional[Date] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    formulaId: Optional[int] = None
    status: Optional[str] = None
    adminNotes: Optional[str] = Field(None, max_length=500)
    cancellationReason: Optional[str] = Field(None, max_length=200)


class StatusUpdate(BaseModel):
    status: str
    adminNotes: Optional[str] = Field(None, max_length=500)


class CancelRequest(BaseModel):
    cancellationReason: Optional[str] = Field(None, max_length=200)


class UserSummary(BaseModel):
    id: int
    firstName: str
    lastName: str
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_model(cls, user: Optional[User]) -> Optional["UserSummary"]:
        if user is None:
            return None
        return cls(
            id=user.id,
            firstName=user.first_name,
            lastName=user.last_name,
            email=user.email,
            phone=user.phone,
        )


class FormulaSummary(BaseModel):
    id: int
    title: str
    price: float
    duration: int

    @classmethod
    def from_model(cls, formula: Optional[Formula]) -> Optional["FormulaSummary"]:
        if formula is None:
            return None
        return cls(id=formula.id, title=formula.title, price=formula.price, duration=formula.duration)


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: int
    clientId: int
    client: Optional[UserSummary] = None
    formulaId: int
    formula: Optional[FormulaSummary] = None
    date: Date
    startTime: str
    endTime: str
    status: str
    adminNotes: Optional[str] = None
    cancellationReason: Optional[str] = None
    processedBy: Optional[UserSummary] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, appointment: Appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            clientId=appointment.client_id,
            client=UserSummary.from_model(appointment.client),
            formulaId=appointment.formula_id,
            formula=FormulaSummary.from_model(appointment.formula),
            date=appointment.date,
            startTime=appointment.start_time,
            endTime=appointment.end_time,
            status=appointment.status,
            adminNotes=appointment.admin_notes,
            cancellationReason=appointment.cancellation_reason,
            processedBy=UserSummary.from_model(appointment.processed_by),
            createdAt=appointment.created_at,
            updatedAt=appointment.updated_at,
        )
