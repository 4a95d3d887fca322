"""Formula domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import Formula
from ...shared.validators import strip_or_none


class FormulaCreate(BaseModel):
    """Schema for creating a new formula"""

    title: str = Field(..., min_length=1, max_length=255)
    label: Optional[str] = Field("", max_length=100)
    price: float = Field(..., ge=0)
    duration: int = Field(..., gt=0, description="Duration in minutes")
    treatments: list[str] = Field(default_factory=list)
    description: Optional[str] = Field(None, max_length=1000)
    isActive: bool = True

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be blank")
        return v


class FormulaUpdate(BaseModel):
    """Schema for updating an existing formula"""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    label: Optional[str] = Field(None, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    duration: Optional[int] = Field(None, gt=0)
    treatments: Optional[list[str]] = None
    description: Optional[str] = Field(None, max_length=1000)
    isActive: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None and not strip_or_none(v):
            raise ValueError("Title cannot be blank")
        return v.strip() if v else v


class FormulaResponse(BaseModel):
    """Schema for formula response"""

    id: int
    title: str
    label: str
    price: float
    duration: int
    treatments: list[str]
    description: Optional[str]
    isActive: bool
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, formula: Formula) -> "FormulaResponse":
        return cls(
            id=formula.id,
            title=formula.title,
            label=formula.label or "",
            price=formula.price,
            duration=formula.duration,
            treatments=list(formula.treatments or []),
            description=formula.description,
            isActive=formula.is_active,
            createdAt=formula.created_at,
            updatedAt=formula.updated_at,
        )
