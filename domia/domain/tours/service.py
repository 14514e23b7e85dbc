"""Tour service - Route optimization and saved tours"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...config import AVERAGE_SPEED_KMH
from ...exceptions import InvalidInputError, NotFoundError
from ...models import Tour, User
from ...shared.datetime_utils import day_bounds, utc_now
from .geo import Coordinate, travel_time_minutes
from .optimizer import Stop, nearest_neighbor_order, route_distance_km
from .repository import TourRepository
from .schemas import TourCreate, TourUpdate

logger = logging.getLogger(__name__)


@dataclass
class OptimizedRoute:
    optimized_order: list
    total_distance: float  # km, rounded to 2 decimals
    estimated_duration: int  # minutes
    # Resolved stops left out of the geometric order for lack of coordinates
    unlocated_stop_ids: list = field(default_factory=list)


class TourService:
    """Service layer for tour business logic"""

    def __init__(self, db: Session, user: User, speed_kmh: float = AVERAGE_SPEED_KMH):
        self.db = db
        self.user = user
        self.repo = TourRepository()
        self.speed_kmh = speed_kmh

    def optimize_route(
        self, stop_ids: list[int], start: Optional[Coordinate] = None
    ) -> OptimizedRoute:
        """
        Compute a visiting order for the user's appointments.

        Appointments are located through their client's geocoded address.
        When none of them has a location the input order is returned as is,
        with zero distance and the summed service durations; this is the
        degraded mode, not an error. Nothing is written to the database.

        Raises:
            InvalidInputError: No appointment id given
            NotFoundError: None of the ids match an appointment of the user
        """
        if not stop_ids:
            raise InvalidInputError("At least one appointment id is required")

        appointments = self.repo.get_appointments_with_clients(self.db, list(set(stop_ids)), self.user.id)
        if not appointments:
            raise NotFoundError("No appointments found")

        # Keep the caller's order: it decides the origin when no start is given
        position = {}
        for index, stop_id in enumerate(stop_ids):
            position.setdefault(stop_id, index)
        appointments.sort(key=lambda a: position[a.id])

        service_minutes = sum(a.duration or 0 for a in appointments)

        stops = []
        unlocated = []
        for appointment in appointments:
            client = appointment.client
            if client is not None and client.has_location:
                stops.append(Stop(appointment.id, Coordinate(client.latitude, client.longitude)))
            else:
                unlocated.append(appointment.id)

        if not stops:
            logger.info(
                f"ℹ️ No geocoded clients among {len(appointments)} appointments - keeping input order"
            )
            return OptimizedRoute(
                optimized_order=list(stop_ids),
                total_distance=0.0,
                estimated_duration=service_minutes,
                unlocated_stop_ids=unlocated,
            )

        order = nearest_neighbor_order(stops, start)
        total_distance = route_distance_km(order, {s.id: s.location for s in stops})
        estimated_duration = round(travel_time_minutes(total_distance, self.speed_kmh) + service_minutes)

        if unlocated:
            logger.info(f"ℹ️ {len(unlocated)} appointment(s) left out of the route: no client coordinates")

        return OptimizedRoute(
            optimized_order=order,
            total_distance=round(total_distance, 2),
            estimated_duration=estimated_duration,
            unlocated_stop_ids=unlocated,
        )

    # ------------------------------------------------------------------
    # Saved tours
    # ------------------------------------------------------------------

    def get_tours(self, day: Optional[date] = None) -> list[Tour]:
        if day is None:
            return self.repo.get_tours(self.db, self.user.id)
        start, end = day_bounds(day)
        return self.repo.get_tours(self.db, self.user.id, start, end)

    def get_tour(self, tour_id: int) -> Tour:
        tour = self.repo.get_tour_by_id(self.db, tour_id, self.user.id)
        if not tour:
            raise NotFoundError("Tour not found")
        return tour

    def create_tour(self, data: TourCreate) -> Tour:
        logger.info(f"🗺️ Saving tour for user_id: {self.user.id}")
        return self.repo.create_tour(
            self.db,
            self.user.id,
            name=data.name,
            date=data.date,
            optimized_order=data.optimizedOrder,
            total_distance=data.totalDistance,
            estimated_duration=data.estimatedDuration,
            notes=data.notes,
            status="draft",
        )

    def update_tour(self, tour_id: int, data: TourUpdate) -> Tour:
        tour = self.get_tour(tour_id)

        updates = {}
        if data.name is not None:
            updates["name"] = data.name
        if data.date is not None:
            updates["date"] = data.date
        if data.optimizedOrder is not None:
            updates["optimized_order"] = data.optimizedOrder
        if data.totalDistance is not None:
            updates["total_distance"] = data.totalDistance
        if data.estimatedDuration is not None:
            updates["estimated_duration"] = data.estimatedDuration
        if data.notes is not None:
            updates["notes"] = data.notes
        if data.status is not None:
            updates["status"] = data.status
            if data.status == "in_progress":
                updates["started_at"] = utc_now()
            elif data.status == "completed":
                updates["completed_at"] = utc_now()

        return self.repo.update_tour(self.db, tour, **updates)

    def delete_tour(self, tour_id: int) -> dict:
        tour = self.get_tour(tour_id)
        self.repo.delete_tour(self.db, tour)
        return {"message": "Tour deleted"}
