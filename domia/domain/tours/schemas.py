"""Tour domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.datetime_utils import to_naive_utc

TOUR_STATUSES = ("draft", "scheduled", "in_progress", "completed")


class StartLocation(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class OptimizeTourRequest(BaseModel):
    """Schema for a route optimization request"""

    appointmentIds: list[int] = Field(..., min_length=1)
    startLocation: Optional[StartLocation] = None


class OptimizedRouteResponse(BaseModel):
    optimizedOrder: list[int]
    totalDistance: float  # km
    estimatedDuration: int  # minutes
    # Appointments whose client has no coordinates; not part of optimizedOrder
    unlocatedAppointmentIds: list[int] = []


class TourCreate(BaseModel):
    """Schema for saving a tour"""

    name: Optional[str] = None
    date: datetime
    optimizedOrder: Optional[list[int]] = None
    totalDistance: Optional[float] = Field(None, ge=0)
    estimatedDuration: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v):
        return to_naive_utc(v)


class TourUpdate(BaseModel):
    """Schema for updating an existing tour"""

    name: Optional[str] = None
    date: Optional[datetime] = None
    optimizedOrder: Optional[list[int]] = None
    totalDistance: Optional[float] = Field(None, ge=0)
    estimatedDuration: Optional[int] = Field(None, ge=0)
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v):
        return to_naive_utc(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in TOUR_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(TOUR_STATUSES)}")
        return v


class TourResponse(BaseModel):
    id: int
    name: Optional[str]
    date: datetime
    optimizedOrder: Optional[list[int]]
    totalDistance: Optional[float]
    estimatedDuration: Optional[int]
    status: str
    startedAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None
    notes: Optional[str]
    created_at: Optional[datetime] = None
