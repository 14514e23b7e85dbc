"""Appointment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.datetime_utils import to_naive_utc

APPOINTMENT_STATUSES = ("scheduled", "completed", "cancelled", "no_show")


class AppointmentCreate(BaseModel):
    """Schema for creating an appointment"""

    clientId: int
    startTime: datetime
    endTime: datetime
    duration: Optional[int] = Field(None, gt=0)  # Minutes; derived from the window when omitted
    serviceName: Optional[str] = None
    notes: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)

    @field_validator("startTime", "endTime")
    @classmethod
    def normalize_times(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_window(self):
        if self.endTime <= self.startTime:
            raise ValueError("endTime must be after startTime")
        return self


class AppointmentUpdate(BaseModel):
    """Schema for updating an appointment"""

    clientId: Optional[int] = None
    startTime: Optional[datetime] = None
    endTime: Optional[datetime] = None
    duration: Optional[int] = Field(None, gt=0)
    serviceName: Optional[str] = None
    notes: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    tourId: Optional[int] = None

    @field_validator("startTime", "endTime")
    @classmethod
    def normalize_times(cls, v):
        return to_naive_utc(v)


class AppointmentStatusUpdate(BaseModel):
    status: str
    cancellationReason: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in APPOINTMENT_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(APPOINTMENT_STATUSES)}")
        return v


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: int
    clientId: int
    clientName: Optional[str] = None
    tourId: Optional[int] = None
    startTime: datetime
    endTime: datetime
    duration: int
    serviceName: Optional[str]
    notes: Optional[str]
    status: str
    price: Optional[float]
    completedAt: Optional[datetime] = None
    cancelledAt: Optional[datetime] = None
    cancellationReason: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
