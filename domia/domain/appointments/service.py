"""Appointment service - Business logic for the worker's calendar"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...exceptions import InvalidInputError, NotFoundError
from ...models import Appointment, User
from ...shared.datetime_utils import day_bounds, minutes_between, utc_now
from ..tours.repository import TourRepository
from .repository import AppointmentRepository
from .schemas import AppointmentCreate, AppointmentStatusUpdate, AppointmentUpdate

logger = logging.getLogger(__name__)


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    def get_appointments(
        self,
        user: User,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
    ) -> list[Appointment]:
        """List appointments between two calendar days (both included)"""
        start = day_bounds(start_date)[0] if start_date else None
        end = day_bounds(end_date)[1] if end_date else None
        if start and end and end <= start:
            raise InvalidInputError("end_date must not be before start_date")
        return self.repo.get_appointments(self.db, user.id, start, end, status)

    def get_appointment(self, appointment_id: int, user: User) -> Appointment:
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id, user.id)
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    def _require_client(self, client_id: int, user: User):
        client = self.repo.get_client(self.db, client_id, user.id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    def create_appointment(self, data: AppointmentCreate, user: User) -> Appointment:
        """Create an appointment for one of the user's clients"""
        self._require_client(data.clientId, user)
        logger.info(f"📅 Creating appointment for user_id: {user.id}, client_id: {data.clientId}")

        return self.repo.create_appointment(
            self.db,
            user.id,
            client_id=data.clientId,
            start_time=data.startTime,
            end_time=data.endTime,
            duration=data.duration or minutes_between(data.startTime, data.endTime),
            service_name=data.serviceName,
            notes=data.notes,
            price=data.price,
            status="scheduled",
        )

    def update_appointment(self, appointment_id: int, data: AppointmentUpdate, user: User) -> Appointment:
        appointment = self.get_appointment(appointment_id, user)

        updates = {}
        if data.clientId is not None:
            self._require_client(data.clientId, user)
            updates["client_id"] = data.clientId
        if data.tourId is not None:
            if not TourRepository.get_tour_by_id(self.db, data.tourId, user.id):
                raise NotFoundError("Tour not found")
            updates["tour_id"] = data.tourId
        if data.serviceName is not None:
            updates["service_name"] = data.serviceName
        if data.notes is not None:
            updates["notes"] = data.notes
        if data.price is not None:
            updates["price"] = data.price

        start = data.startTime or appointment.start_time
        end = data.endTime or appointment.end_time
        if data.startTime is not None or data.endTime is not None:
            if end <= start:
                raise InvalidInputError("endTime must be after startTime")
            updates["start_time"] = start
            updates["end_time"] = end
            updates["duration"] = data.duration or minutes_between(start, end)
        elif data.duration is not None:
            updates["duration"] = data.duration

        return self.repo.update_appointment(self.db, appointment, **updates)

    def set_status(self, appointment_id: int, data: AppointmentStatusUpdate, user: User) -> Appointment:
        """Change the status; completion and cancellation are time-stamped"""
        appointment = self.get_appointment(appointment_id, user)

        updates = {"status": data.status}
        if data.status == "completed":
            updates["completed_at"] = utc_now()
        elif data.status == "cancelled":
            updates["cancelled_at"] = utc_now()
            updates["cancellation_reason"] = data.cancellationReason

        logger.info(f"🔄 Appointment {appointment.id}: {appointment.status} -> {data.status}")
        return self.repo.update_appointment(self.db, appointment, **updates)

    def delete_appointment(self, appointment_id: int, user: User) -> dict:
        appointment = self.get_appointment(appointment_id, user)
        self.repo.delete_appointment(self.db, appointment)
        return {"message": "Appointment deleted"}
