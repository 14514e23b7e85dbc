"""Mission router - FastAPI endpoints for company missions"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_company
from ...database import get_db
from ...models import User
from ...shared.datetime_utils import to_naive_utc
from ..offers.router import hours_to_response, offer_to_response
from .schemas import MissionCreate, MissionCreateResponse, MissionHoursResponse, MissionSummary
from .service import STATUS_COUNTERS, Mission, MissionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/missions", tags=["Missions"])


def get_mission_service(db: Session = Depends(get_db)) -> MissionService:
    """Dependency injection for MissionService"""
    return MissionService(db)


def _to_summary(mission: Mission) -> MissionSummary:
    first = mission.first
    counts = {STATUS_COUNTERS[s]: n for s, n in mission.counts.items() if s in STATUS_COUNTERS}
    return MissionSummary(
        title=first.title,
        description=first.description,
        startDate=first.start_date,
        endDate=first.end_date,
        address=first.address,
        city=first.city,
        postalCode=first.postal_code,
        country=first.country,
        serviceType=first.service_type,
        compensation=first.compensation,
        numberOfPositions=first.number_of_positions,
        notes=first.notes,
        created_at=first.created_at,
        totalOffers=len(mission.offers),
        workersNotified=len(mission.worker_ids),
        **counts,
    )


@router.get("", response_model=list[MissionSummary])
async def get_missions(
    current_user: User = Depends(require_company),
    service: MissionService = Depends(get_mission_service),
):
    """List the company's missions with per-status offer counts"""
    return [_to_summary(m) for m in service.list_missions(current_user)]


@router.post("", response_model=MissionCreateResponse, status_code=201)
async def create_mission(
    data: MissionCreate,
    current_user: User = Depends(require_company),
    service: MissionService = Depends(get_mission_service),
):
    """Publish a mission: one pending offer per selected worker"""
    offers = service.create_mission(data, current_user)
    return MissionCreateResponse(
        offersCreated=len(offers),
        compensation=offers[0].compensation,
        offers=[offer_to_response(o, o.status) for o in offers],
    )


@router.get("/hours", response_model=MissionHoursResponse)
async def get_mission_hours(
    title: str = Query(...),
    startDate: datetime = Query(...),
    endDate: datetime = Query(...),
    address: str = Query(...),
    current_user: User = Depends(require_company),
    service: MissionService = Depends(get_mission_service),
):
    """Hours submitted by every worker of one mission"""
    hours = service.get_mission_hours(
        current_user, title, to_naive_utc(startDate), to_naive_utc(endDate), address
    )
    return MissionHoursResponse(hours=[hours_to_response(h) for h in hours])
