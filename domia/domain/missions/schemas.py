"""Mission domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.datetime_utils import to_naive_utc
from ..offers.schemas import HoursResponse, OfferResponse


class MissionCreate(BaseModel):
    """Schema for publishing a mission to several workers"""

    title: str
    description: Optional[str] = None
    startDate: datetime
    endDate: datetime
    address: str
    city: str
    postalCode: str
    country: Optional[str] = "France"
    serviceType: Optional[str] = None
    hourlyRate: float
    numberOfPositions: int = 1
    notes: Optional[str] = None
    workerIds: list[int]

    @field_validator("startDate", "endDate")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)


class MissionCreateResponse(BaseModel):
    success: bool = True
    offersCreated: int
    compensation: float
    offers: list[OfferResponse]


class MissionSummary(BaseModel):
    """One mission: the company's offers sharing title, window and address"""

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
    created_at: Optional[datetime] = None
    totalOffers: int
    pendingCount: int = 0
    acceptedCount: int = 0
    declinedCount: int = 0
    expiredCount: int = 0
    inProgressCount: int = 0
    completedPendingValidationCount: int = 0
    needsCorrectionCount: int = 0
    completedValidatedCount: int = 0
    workersNotified: int


class MissionHoursResponse(BaseModel):
    hours: list[HoursResponse]
