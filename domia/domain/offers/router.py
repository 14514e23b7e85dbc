"""Offer router - FastAPI endpoints for job offers and mission hours"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_company, require_worker
from ...database import get_db
from ...models import User
from ...models_mission import JobOffer, MissionHours
from .hours_service import HoursService
from .schemas import (
    AcceptOfferResponse,
    HoursResponse,
    HoursSubmitRequest,
    HoursValidationRequest,
    OfferCreate,
    OfferResponse,
    OfferUpdate,
    PartySummary,
)
from .service import OfferService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/offers", tags=["Offers"])


def get_offer_service(db: Session = Depends(get_db)) -> OfferService:
    """Dependency injection for OfferService"""
    return OfferService(db)


def get_hours_service(db: Session = Depends(get_db)) -> HoursService:
    """Dependency injection for HoursService"""
    return HoursService(db)


def offer_to_response(offer: JobOffer, status: str) -> OfferResponse:
    issuer = None
    if offer.issuer is not None:
        issuer = PartySummary(
            id=offer.issuer.id,
            name=offer.issuer.display_name,
            email=offer.issuer.email,
            phone=offer.issuer.phone,
        )
    return OfferResponse(
        id=offer.id,
        issuerId=offer.issuer_id,
        workerId=offer.worker_id,
        issuer=issuer,
        title=offer.title,
        description=offer.description,
        startDate=offer.start_date,
        endDate=offer.end_date,
        address=offer.address,
        city=offer.city,
        postalCode=offer.postal_code,
        country=offer.country,
        serviceType=offer.service_type,
        compensation=offer.compensation,
        numberOfPositions=offer.number_of_positions,
        notes=offer.notes,
        status=status,
        respondedAt=offer.responded_at,
        created_at=offer.created_at,
    )


def hours_to_response(hours: MissionHours) -> HoursResponse:
    return HoursResponse(
        id=hours.id,
        offerId=hours.offer_id,
        workerId=hours.worker_id,
        workerName=hours.worker.display_name if hours.worker is not None else None,
        hoursWorked=hours.hours_worked,
        status=hours.status,
        rejectionNote=hours.rejection_note,
        validatedAt=hours.validated_at,
        validatedBy=hours.validated_by,
        created_at=hours.created_at,
        updated_at=hours.updated_at,
    )


@router.get("", response_model=list[OfferResponse])
async def get_offers(
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    """Offers received by the current user; pending offers past their end read as expired"""
    offers = service.list_offers(current_user, status)
    return [offer_to_response(o, service.status_of(o)) for o in offers]


@router.post("", response_model=OfferResponse, status_code=201)
async def create_offer(
    data: OfferCreate,
    current_user: User = Depends(require_company),
    service: OfferService = Depends(get_offer_service),
):
    """Send an offer to a single worker"""
    offer = service.create_offer(data, current_user)
    return offer_to_response(offer, service.status_of(offer))


@router.get("/{offer_id}", response_model=OfferResponse)
async def get_offer(
    offer_id: int,
    current_user: User = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    offer = service.get_offer(offer_id, current_user)
    return offer_to_response(offer, service.status_of(offer))


@router.patch("/{offer_id}", response_model=OfferResponse)
async def update_offer(
    offer_id: int,
    data: OfferUpdate,
    current_user: User = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    """Edit a pending offer (issuer only)"""
    offer = service.update_offer(offer_id, data, current_user)
    return offer_to_response(offer, service.status_of(offer))


@router.post("/{offer_id}/accept", response_model=AcceptOfferResponse)
async def accept_offer(
    offer_id: int,
    current_user: User = Depends(require_worker),
    service: OfferService = Depends(get_offer_service),
):
    """Accept an offer; adds the mission to the worker's calendar"""
    result = service.accept(offer_id, current_user.id)
    return AcceptOfferResponse(
        offer=offer_to_response(result.offer, result.offer.status),
        appointmentId=result.appointment.id,
        clientId=result.client.id,
    )


@router.post("/{offer_id}/decline", response_model=OfferResponse)
async def decline_offer(
    offer_id: int,
    current_user: User = Depends(require_worker),
    service: OfferService = Depends(get_offer_service),
):
    offer = service.decline_offer(offer_id, current_user.id)
    return offer_to_response(offer, offer.status)


@router.post("/{offer_id}/complete", response_model=HoursResponse)
async def complete_offer(
    offer_id: int,
    data: HoursSubmitRequest,
    current_user: User = Depends(require_worker),
    service: HoursService = Depends(get_hours_service),
):
    """Finish a mission by submitting the hours worked"""
    hours = service.submit_hours(offer_id, current_user.id, data.hoursWorked)
    return hours_to_response(hours)


@router.get("/{offer_id}/hours", response_model=list[HoursResponse])
async def get_offer_hours(
    offer_id: int,
    current_user: User = Depends(get_current_user),
    service: HoursService = Depends(get_hours_service),
):
    return [hours_to_response(h) for h in service.list_hours(offer_id, current_user)]


@router.post("/{offer_id}/validate-hours", response_model=HoursResponse)
async def validate_offer_hours(
    offer_id: int,
    data: HoursValidationRequest,
    current_user: User = Depends(get_current_user),
    service: HoursService = Depends(get_hours_service),
):
    """Validate or reject (with a note) the hours submitted for an offer"""
    hours = service.validate_hours(
        offer_id, data.hoursId, current_user.id, data.action, data.rejectionNote
    )
    return hours_to_response(hours)
