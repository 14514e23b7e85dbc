"""Appointment router - FastAPI endpoints for appointment operations"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Appointment, User
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


def _to_response(a: Appointment) -> AppointmentResponse:
    client_name = None
    if a.client is not None:
        client_name = " ".join(p for p in (a.client.first_name, a.client.last_name) if p)
    return AppointmentResponse(
        id=a.id,
        clientId=a.client_id,
        clientName=client_name,
        tourId=a.tour_id,
        startTime=a.start_time,
        endTime=a.end_time,
        duration=a.duration,
        serviceName=a.service_name,
        notes=a.notes,
        status=a.status,
        price=a.price,
        completedAt=a.completed_at,
        cancelledAt=a.cancelled_at,
        cancellationReason=a.cancellation_reason,
        created_at=a.created_at,
    )


@router.get("", response_model=list[AppointmentResponse])
async def get_appointments(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """List appointments, optionally within a date range and/or by status"""
    appointments = service.get_appointments(current_user, start_date, end_date, status)
    return [_to_response(a) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return _to_response(service.get_appointment(appointment_id, current_user))


@router.post("", response_model=AppointmentResponse)
async def create_appointment(
    data: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Create an appointment"""
    return _to_response(service.create_appointment(data, current_user))


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return _to_response(service.update_appointment(appointment_id, data, current_user))


@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    data: AppointmentStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Mark an appointment completed, cancelled, no-show or scheduled again"""
    return _to_response(service.set_status(appointment_id, data, current_user))


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.delete_appointment(appointment_id, current_user)
