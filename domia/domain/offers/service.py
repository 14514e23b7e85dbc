"""
Offer service - Company -> worker job offers

Handles offer creation, the worker's answer (accept / decline) and everything
an acceptance materializes in the worker's workspace:
- the offer moves to in_progress
- the issuing company becomes (or is matched to) one of the worker's clients
- a worker <-> company relation is recorded
- an appointment covering the offer window is added to the worker's calendar
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...config import SCHEDULE_BUFFER_MINUTES
from ...exceptions import (
    DomainError,
    ExpiredError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    PositionsFilledError,
    ScheduleConflictError,
)
from ...models import ACCOUNT_TYPE_WORKER, Appointment, Client, User, WorkerClient
from ...models_mission import (
    FILLED_OFFER_STATUSES,
    OFFER_DECLINED,
    OFFER_EXPIRED,
    OFFER_IN_PROGRESS,
    OFFER_PENDING,
    JobOffer,
)
from ...shared.datetime_utils import minutes_between, utc_now
from ...shared.validators import normalize_text
from ..clients.repository import ClientRepository
from .repository import OfferRepository
from .schemas import OfferCreate, OfferUpdate

logger = logging.getLogger(__name__)


def effective_status(offer: JobOffer, now: datetime) -> str:
    """Stored status, except that a pending offer whose window has ended reads as expired"""
    if offer.status == OFFER_PENDING and offer.end_date < now:
        return OFFER_EXPIRED
    return offer.status


def windows_conflict(
    start: datetime,
    end: datetime,
    other_start: datetime,
    other_end: datetime,
    buffer: timedelta = timedelta(minutes=SCHEDULE_BUFFER_MINUTES),
) -> bool:
    """
    True when [start, end] widened by ``buffer`` on both sides overlaps
    [other_start, other_end]. A gap of exactly ``buffer`` is allowed.
    """
    return start - buffer < other_end and end + buffer > other_start


@dataclass
class AcceptanceResult:
    offer: JobOffer
    client: Client
    appointment: Appointment


class OfferService:
    """Service layer for offer business logic"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.repo = OfferRepository()
        self.clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_offer(self, offer_id: int, user: User) -> JobOffer:
        """Get an offer visible to its issuer or its worker"""
        offer = self.repo.get_offer(self.db, offer_id)
        if not offer:
            raise NotFoundError("Offer not found")
        if user.id not in (offer.issuer_id, offer.worker_id):
            raise ForbiddenError("Not allowed to view this offer")
        return offer

    def list_offers(self, worker: User, status: Optional[str] = None) -> list[JobOffer]:
        """Offers received by a worker, optionally filtered by (effective) status"""
        offers = self.repo.get_offers_for_worker(self.db, worker.id)
        if status:
            now = self.clock()
            offers = [o for o in offers if effective_status(o, now) == status]
        return offers

    def status_of(self, offer: JobOffer) -> str:
        return effective_status(offer, self.clock())

    # ------------------------------------------------------------------
    # Company side
    # ------------------------------------------------------------------

    def _target_worker(self, worker_id: int, issuer: User) -> User:
        if worker_id == issuer.id:
            raise InvalidInputError("You cannot send an offer to yourself")
        worker = self.repo.get_user(self.db, worker_id)
        if not worker:
            raise NotFoundError("Worker not found")
        if worker.account_type != ACCOUNT_TYPE_WORKER:
            raise InvalidInputError("Selected user is not a worker")
        return worker

    def _check_window(self, start: datetime, end: datetime) -> None:
        if start >= end:
            raise InvalidInputError("End date must be after start date")
        if start < self.clock():
            raise InvalidInputError("Start date cannot be in the past")

    def build_offer(self, issuer: User, worker_id: int, **fields) -> JobOffer:
        """Validate and stage (without committing) a pending offer"""
        for name in ("title", "address", "city", "postal_code"):
            fields[name] = normalize_text(fields.get(name))
            if not fields[name]:
                raise InvalidInputError("Title, dates and address are required")
        self._check_window(fields["start_date"], fields["end_date"])
        self._target_worker(worker_id, issuer)

        offer = JobOffer(issuer_id=issuer.id, worker_id=worker_id, status=OFFER_PENDING, **fields)
        self.db.add(offer)
        return offer

    def create_offer(self, data: OfferCreate, issuer: User) -> JobOffer:
        """Send a single offer to one worker"""
        offer = self.build_offer(
            issuer,
            data.workerId,
            title=data.title,
            description=data.description,
            start_date=data.startDate,
            end_date=data.endDate,
            address=data.address,
            city=data.city,
            postal_code=data.postalCode,
            country=data.country or "France",
            service_type=data.serviceType,
            compensation=data.compensation,
            number_of_positions=data.numberOfPositions,
            notes=data.notes,
        )
        self.db.commit()
        self.db.refresh(offer)
        logger.info(f"📨 Offer {offer.id} sent by user {issuer.id} to worker {offer.worker_id}")
        return offer

    def update_offer(self, offer_id: int, data: OfferUpdate, issuer: User) -> JobOffer:
        """Edit an offer the worker has not answered yet"""
        offer = self.repo.get_offer(self.db, offer_id)
        if not offer:
            raise NotFoundError("Offer not found")
        if offer.issuer_id != issuer.id:
            raise ForbiddenError("Only the issuer can edit this offer")
        if offer.status != OFFER_PENDING:
            raise InvalidStateError("Only pending offers can be edited")

        updates = {
            "title": data.title,
            "description": data.description,
            "address": data.address,
            "city": data.city,
            "postal_code": data.postalCode,
            "country": data.country,
            "service_type": data.serviceType,
            "compensation": data.compensation,
            "notes": data.notes,
        }
        for name in ("title", "address", "city", "postal_code"):
            if updates[name] is not None and not normalize_text(updates[name]):
                raise InvalidInputError(f"{name} cannot be empty")

        if data.startDate is not None or data.endDate is not None:
            start = data.startDate or offer.start_date
            end = data.endDate or offer.end_date
            self._check_window(start, end)
            updates["start_date"] = start
            updates["end_date"] = end

        for key, value in updates.items():
            if value is not None:
                setattr(offer, key, value)

        self.db.commit()
        self.db.refresh(offer)
        return offer

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def decline_offer(self, offer_id: int, worker_id: int) -> JobOffer:
        try:
            offer = self.repo.get_offer(self.db, offer_id, lock=True)
            if not offer:
                raise NotFoundError("Offer not found")
            if offer.worker_id != worker_id:
                raise ForbiddenError("This offer was sent to another worker")
            if offer.status != OFFER_PENDING:
                raise InvalidStateError("Offer has already been responded to")

            changed = self.repo.transition_status(
                self.db, offer.id, (OFFER_PENDING,), status=OFFER_DECLINED, responded_at=self.clock()
            )
            if not changed:
                raise InvalidStateError("Offer has already been responded to")

            self.db.commit()
        except DomainError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Decline of offer {offer_id} by worker {worker_id} refused: {e.message}")
            raise

        self.db.refresh(offer)
        logger.info(f"❌ Offer {offer.id} declined by worker {worker_id}")
        return offer

    def _check_schedule(self, offer: JobOffer, worker_id: int) -> None:
        for appointment in self.repo.get_scheduled_appointments(self.db, worker_id):
            if windows_conflict(offer.start_date, offer.end_date, appointment.start_time, appointment.end_time):
                raise ScheduleConflictError("This offer overlaps with an existing appointment")

        for other in self.repo.get_active_offers(self.db, worker_id, exclude_offer_id=offer.id):
            if windows_conflict(offer.start_date, offer.end_date, other.start_date, other.end_date):
                raise ScheduleConflictError("This offer overlaps with another accepted mission")

    def _materialize_client(self, offer: JobOffer, worker_id: int) -> Client:
        """The issuing company as a client of the worker, reused when already present"""
        issuer = self.repo.get_user(self.db, offer.issuer_id)
        if not issuer:
            raise NotFoundError("Offer issuer not found")

        client = None
        if issuer.email:
            client = ClientRepository.get_client_by_email(self.db, worker_id, issuer.email)
        if client is None:
            client = Client(
                user_id=worker_id,
                first_name=issuer.first_name or "Client",
                last_name=issuer.last_name or issuer.business_name or "",
                phone=issuer.phone,
                email=issuer.email,
                address=offer.address,
                city=offer.city,
                postal_code=offer.postal_code,
                country=offer.country or "France",
                notes=f"Added automatically from mission offer: {offer.title}",
            )
            self.db.add(client)
            self.db.flush()

        if not self.repo.get_worker_client(self.db, worker_id, offer.issuer_id):
            self.db.add(WorkerClient(worker_id=worker_id, company_id=offer.issuer_id, client_id=client.id))

        return client

    def accept(self, offer_id: int, worker_id: int) -> AcceptanceResult:
        """
        Accept an offer and materialize its side effects.

        Checks run in this order: existence, recipient, pending status,
        remaining positions, expiry, then the worker's calendar (with the
        schedule buffer). Either every side effect is committed or none is.

        Raises:
            NotFoundError, ForbiddenError, InvalidStateError,
            PositionsFilledError, ExpiredError, ScheduleConflictError
        """
        now = self.clock()
        try:
            offer = self.repo.get_offer(self.db, offer_id)
            if not offer:
                raise NotFoundError("Offer not found")
            if offer.worker_id != worker_id:
                raise ForbiddenError("This offer was sent to another worker")

            # Locks every offer of the mission (this one included) and reloads it
            siblings = self.repo.get_mission_offers(
                self.db,
                offer.issuer_id,
                offer.title,
                offer.start_date,
                offer.end_date,
                offer.address,
                lock=True,
            )
            if offer.status != OFFER_PENDING:
                raise InvalidStateError("Offer has already been responded to")

            positions = offer.number_of_positions or 1
            filled = sum(1 for o in siblings if o.status in FILLED_OFFER_STATUSES)
            if filled >= positions:
                raise PositionsFilledError("All positions for this mission are already filled")

            if offer.end_date < now:
                raise ExpiredError("Offer has expired")

            self._check_schedule(offer, worker_id)

            changed = self.repo.transition_status(
                self.db, offer.id, (OFFER_PENDING,), status=OFFER_IN_PROGRESS, responded_at=now
            )
            if not changed:
                raise InvalidStateError("Offer has already been responded to")
            if self.repo.count_filled_siblings(self.db, offer) > positions:
                raise PositionsFilledError("All positions for this mission are already filled")

            client = self._materialize_client(offer, worker_id)

            notes = f"Created automatically from offer: {offer.title}"
            if offer.notes:
                notes += f"\n{offer.notes}"
            appointment = Appointment(
                user_id=worker_id,
                client_id=client.id,
                start_time=offer.start_date,
                end_time=offer.end_date,
                duration=minutes_between(offer.start_date, offer.end_date),
                service_name=offer.service_type or offer.title,
                notes=notes,
                status="scheduled",
                price=offer.compensation,
            )
            self.db.add(appointment)

            self.db.commit()
        except DomainError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Offer {offer_id} not accepted by worker {worker_id}: {e.message}")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to accept offer {offer_id}: {e}")
            raise

        self.db.refresh(offer)
        self.db.refresh(appointment)
        logger.info(f"✅ Offer {offer.id} accepted by worker {worker_id} (appointment {appointment.id})")
        return AcceptanceResult(offer=offer, client=client, appointment=appointment)

    def accept_offer(self, offer_id: int, worker_id: int) -> JobOffer:
        return self.accept(offer_id, worker_id).offer
