"""Offer domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, StrictFloat, field_validator

from ...shared.datetime_utils import to_naive_utc


class OfferCreate(BaseModel):
    """Schema for sending an offer to one worker"""

    workerId: int
    title: str
    description: Optional[str] = None
    startDate: datetime
    endDate: datetime
    address: str
    city: str
    postalCode: str
    country: Optional[str] = "France"
    serviceType: Optional[str] = None
    compensation: Optional[float] = Field(None, ge=0)
    numberOfPositions: int = Field(1, ge=1)
    notes: Optional[str] = None

    @field_validator("startDate", "endDate")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)


class OfferUpdate(BaseModel):
    """Schema for editing a pending offer"""

    title: Optional[str] = None
    description: Optional[str] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postalCode: Optional[str] = None
    country: Optional[str] = None
    serviceType: Optional[str] = None
    compensation: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("startDate", "endDate")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)


class HoursSubmitRequest(BaseModel):
    # Checked by the service so that zero and negative values get a domain error
    hoursWorked: StrictFloat


class HoursValidationRequest(BaseModel):
    hoursId: int
    action: str  # validate | reject
    rejectionNote: Optional[str] = None


class PartySummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class OfferResponse(BaseModel):
    """Schema for offer response"""

    id: int
    issuerId: int
    workerId: int
    issuer: Optional[PartySummary] = None
    title: str
    description: Optional[str]
    startDate: datetime
    endDate: datetime
    address: str
    city: str
    postalCode: str
    country: Optional[str]
    serviceType: Optional[str]
    compensation: Optional[float]
    numberOfPositions: int
    notes: Optional[str]
    status: str
    respondedAt: Optional[datetime] = None
    created_at: Optional[datetime] = None


class HoursResponse(BaseModel):
    """Schema for mission hours response"""

    id: int
    offerId: int
    workerId: int
    workerName: Optional[str] = None
    hoursWorked: float
    status: str
    rejectionNote: Optional[str] = None
    validatedAt: Optional[datetime] = None
    validatedBy: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AcceptOfferResponse(BaseModel):
    success: bool = True
    offer: OfferResponse
    appointmentId: Optional[int] = None
    clientId: Optional[int] = None
