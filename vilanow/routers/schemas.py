"""Request bodies accepted by the JSON API."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    phone: str = ""
    role: Literal["seeker", "agent"] = "seeker"


class LoginRequest(BaseModel):
    email: str
    password: str


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str


class PropertyIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str
    type: str
    price: float
    location: str
    area: str = ""
    description: str = ""
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    images: List[str] = Field(default_factory=list)
    featured: bool = False

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("price must be positive")
        return v


class PropertyUpdate(BaseModel):
    """Partial listing edit. Only the fields sent are applied."""

    title: Optional[str] = None
    type: Optional[str] = None
    price: Optional[float] = Field(default=None, gt=0)
    location: Optional[str] = None
    area: Optional[str] = None
    description: Optional[str] = None
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    images: Optional[List[str]] = None
    featured: Optional[bool] = None
    status: Optional[str] = None


class PropertyRequestIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    location: str
    type: Optional[str] = None
    minBudget: float = 0
    maxBudget: float = 0
    bedrooms: Optional[int] = None
    description: str = ""


class StatusChange(BaseModel):
    status: str


class InterestIn(BaseModel):
    propertyId: str
    message: str = ""
    seriousnessScore: Optional[int] = Field(default=None, ge=1, le=10)


class InterestUpdate(BaseModel):
    status: Optional[Literal["pending", "contacted", "viewing-scheduled", "closed"]] = None
    message: Optional[str] = None
    notes: Optional[str] = None
    seriousnessScore: Optional[int] = Field(default=None, ge=1, le=10)


class PurchaseRequest(BaseModel):
    bundleId: str


class VerifyPaymentRequest(BaseModel):
    reference: str = Field(min_length=1)


class InspectionIn(BaseModel):
    interestId: str
    scheduledDate: str
    scheduledTime: str
    notes: str = ""


class InspectionUpdate(BaseModel):
    scheduledDate: Optional[str] = None
    scheduledTime: Optional[str] = None
    status: Optional[Literal["pending", "confirmed", "rescheduled", "cancelled", "completed"]] = None
    notes: Optional[str] = None
    agentNotes: Optional[str] = None


class SettingUpdate(BaseModel):
    value: Any


class MessageIn(BaseModel):
    message: str


def as_fields(model: BaseModel) -> Dict[str, Any]:
    """Body as a plain dict, keeping extra fields allowed by the model."""
    return model.model_dump(exclude_none=True)


def as_changes(model: BaseModel) -> Dict[str, Any]:
    """Only the fields the client actually sent."""
    return model.model_dump(exclude_unset=True, exclude_none=True)
