"""Mission service - A company's offers fanned out to several workers"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from ...exceptions import DomainError, InvalidInputError
from ...models import User
from ...models_mission import (
    OFFER_ACCEPTED,
    OFFER_COMPLETED_PENDING_VALIDATION,
    OFFER_COMPLETED_VALIDATED,
    OFFER_DECLINED,
    OFFER_EXPIRED,
    OFFER_IN_PROGRESS,
    OFFER_NEEDS_CORRECTION,
    OFFER_PENDING,
    JobOffer,
    MissionHours,
)
from ...shared.datetime_utils import calendar_days_spanned, utc_now
from ..offers.repository import OfferRepository
from ..offers.service import OfferService, effective_status
from .schemas import MissionCreate

logger = logging.getLogger(__name__)

STATUS_COUNTERS = {
    OFFER_PENDING: "pendingCount",
    OFFER_ACCEPTED: "acceptedCount",
    OFFER_DECLINED: "declinedCount",
    OFFER_EXPIRED: "expiredCount",
    OFFER_IN_PROGRESS: "inProgressCount",
    OFFER_COMPLETED_PENDING_VALIDATION: "completedPendingValidationCount",
    OFFER_NEEDS_CORRECTION: "needsCorrectionCount",
    OFFER_COMPLETED_VALIDATED: "completedValidatedCount",
}


def mission_key(offer: JobOffer) -> tuple:
    return (offer.title, offer.start_date, offer.end_date, offer.address)


@dataclass
class Mission:
    offers: list = field(default_factory=list)
    counts: dict = field(default_factory=dict)
    worker_ids: set = field(default_factory=set)

    @property
    def first(self) -> JobOffer:
        return self.offers[0]


class MissionService:
    """Service layer for missions"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.repo = OfferRepository()
        self.clock = clock

    def create_mission(self, data: MissionCreate, company: User) -> list[JobOffer]:
        """
        Send one pending offer per worker.

        Each offer pays the hourly rate times the number of calendar days the
        mission spans (first and last day included). All offers are created
        or none is.
        """
        if data.hourlyRate is None or data.hourlyRate <= 0:
            raise InvalidInputError("Hourly rate is required and must be greater than 0")
        if data.numberOfPositions is None or data.numberOfPositions <= 0:
            raise InvalidInputError("Number of positions is required and must be greater than 0")

        worker_ids = list(dict.fromkeys(data.workerIds))
        if not worker_ids:
            raise InvalidInputError("At least one worker must be selected")

        compensation = round(data.hourlyRate * calendar_days_spanned(data.startDate, data.endDate), 2)
        offer_service = OfferService(self.db, clock=self.clock)

        try:
            offers = [
                offer_service.build_offer(
                    company,
                    worker_id,
                    title=data.title,
                    description=data.description,
                    start_date=data.startDate,
                    end_date=data.endDate,
                    address=data.address,
                    city=data.city,
                    postal_code=data.postalCode,
                    country=data.country or "France",
                    service_type=data.serviceType,
                    compensation=compensation,
                    number_of_positions=data.numberOfPositions,
                    notes=data.notes,
                )
                for worker_id in worker_ids
            ]
            self.db.commit()
        except DomainError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Mission '{data.title}' by company {company.id} rejected: {e.message}")
            raise

        for offer in offers:
            self.db.refresh(offer)
        logger.info(f"📢 Mission '{data.title}' sent to {len(offers)} worker(s) by company {company.id}")
        return offers

    def list_missions(self, company: User) -> list[Mission]:
        """The company's offers grouped into missions, most recent first"""
        now = self.clock()
        missions: dict[tuple, Mission] = {}
        for offer in self.repo.get_offers_for_issuer(self.db, company.id):
            mission = missions.setdefault(mission_key(offer), Mission())
            mission.offers.append(offer)
            mission.worker_ids.add(offer.worker_id)
            status = effective_status(offer, now)
            mission.counts[status] = mission.counts.get(status, 0) + 1
        return list(missions.values())

    def get_mission_hours(
        self, company: User, title: str, start_date: datetime, end_date: datetime, address: str
    ) -> list[MissionHours]:
        """Hours submitted on every offer of one mission"""
        offers = self.repo.get_mission_offers(self.db, company.id, title, start_date, end_date, address)
        return self.repo.get_hours_for_offers(self.db, [o.id for o in offers])
