"""Tour router - FastAPI endpoints for route optimization and saved tours"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...config import OPTIMIZE_RATE_LIMIT_RPM
from ...database import get_db
from ...models import Tour, User
from ...rate_limiter import create_rate_limiter
from .geo import Coordinate
from .schemas import (
    OptimizedRouteResponse,
    OptimizeTourRequest,
    TourCreate,
    TourResponse,
    TourUpdate,
)
from .service import TourService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tours", tags=["Tours"])

rate_limit_optimize = create_rate_limiter(
    limit=OPTIMIZE_RATE_LIMIT_RPM, window_seconds=60, key_prefix="tour_optimize"
)


def get_tour_service(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
) -> TourService:
    """Dependency injection for TourService"""
    return TourService(db, current_user)


def _to_response(tour: Tour) -> TourResponse:
    return TourResponse(
        id=tour.id,
        name=tour.name,
        date=tour.date,
        optimizedOrder=tour.optimized_order,
        totalDistance=tour.total_distance,
        estimatedDuration=tour.estimated_duration,
        status=tour.status,
        startedAt=tour.started_at,
        completedAt=tour.completed_at,
        notes=tour.notes,
        created_at=tour.created_at,
    )


@router.post("/optimize", response_model=OptimizedRouteResponse)
async def optimize_tour(
    data: OptimizeTourRequest,
    service: TourService = Depends(get_tour_service),
    _: None = Depends(rate_limit_optimize),
):
    """Order appointments by proximity and estimate the tour length and duration"""
    start = None
    if data.startLocation is not None:
        start = Coordinate(data.startLocation.lat, data.startLocation.lon)

    route = service.optimize_route(data.appointmentIds, start)
    return OptimizedRouteResponse(
        optimizedOrder=route.optimized_order,
        totalDistance=route.total_distance,
        estimatedDuration=route.estimated_duration,
        unlocatedAppointmentIds=route.unlocated_stop_ids,
    )


@router.get("", response_model=list[TourResponse])
async def get_tours(
    day: Optional[date] = Query(None, alias="date"),
    service: TourService = Depends(get_tour_service),
):
    """List saved tours, optionally for a single day"""
    return [_to_response(t) for t in service.get_tours(day)]


@router.post("", response_model=TourResponse)
async def create_tour(data: TourCreate, service: TourService = Depends(get_tour_service)):
    return _to_response(service.create_tour(data))


@router.get("/{tour_id}", response_model=TourResponse)
async def get_tour(tour_id: int, service: TourService = Depends(get_tour_service)):
    return _to_response(service.get_tour(tour_id))


@router.patch("/{tour_id}", response_model=TourResponse)
async def update_tour(
    tour_id: int, data: TourUpdate, service: TourService = Depends(get_tour_service)
):
    """Update a tour; moving it to in_progress or completed stamps the time"""
    return _to_response(service.update_tour(tour_id, data))


@router.delete("/{tour_id}")
async def delete_tour(tour_id: int, service: TourService = Depends(get_tour_service)):
    return service.delete_tour(tour_id)
