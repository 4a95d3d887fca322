from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

APPOINTMENT_STATUSES = ("pending", "confirmed", "cancelled", "in_progress", "completed")
USER_ROLES = ("client", "admin")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)  # Stored lowercase
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    role = Column(String(20), default="client", nullable=False)  # client, admin
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    appointments = relationship(
        "Appointment", back_populates="client", foreign_keys="Appointment.client_id"
    )


class Formula(Base):
    __tablename__ = "formulas"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), unique=True, nullable=False)
    label = Column(String(100), default="", nullable=False)  # Optional badge shown on the card
    price = Column(Float, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    treatments = Column(JSON, default=list, nullable=False)  # list of treatment names
    description = Column(String(1000), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    appointments = relationship("Appointment", back_populates="formula")


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (Index("ix_appointments_date_status", "date", "status"),)

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    formula_id = Column(Integer, ForeignKey("formulas.id"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM format
    end_time = Column(String(5), nullable=False)  # HH:MM format
    status = Column(String(20), default="pending", nullable=False)
    admin_notes = Column(Text, nullable=True)
    cancellation_reason = Column(String(200), nullable=True)
    processed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("User", back_populates="appointments", foreign_keys=[client_id])
    formula = relationship("Formula", back_populates="appointments")
    processed_by = relationship("User", foreign_keys=[processed_by_id])


class BookingDayLock(Base):
    """One row per calendar date, locked while a booking for that date is written"""

    __tablename__ = "booking_day_locks"

    day = Column(Date, primary_key=True)
    created_at = Column(DateTime, server_default=func.now())
