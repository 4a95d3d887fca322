"""Account schemas - registration, login and profile payloads"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import User
from ...shared.validators import validate_email, validate_phone


class RegisterRequest(BaseModel):
    firstName: str = Field(..., min_length=1, max_length=100)
    lastName: str = Field(..., min_length=1, max_length=100)
    email: str
    password: str = Field(..., min_length=6, max_length=128)
    phone: str

    @field_validator("firstName", "lastName")
    @classmethod
    def strip_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        if not v or not v.strip():
            raise ValueError("Email is required")
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        if not v or not v.strip():
            raise ValueError("Phone number is required")
        return validate_phone(v)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class UserResponse(BaseModel):
    id: int
    firstName: str
    lastName: str
    email: str
    phone: Optional[str]
    role: str
    createdAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            firstName=user.first_name,
            lastName=user.last_name,
            email=user.email,
            phone=user.phone,
            role=user.role,
            createdAt=user.created_at,
        )
