"""
Mission hours - submission by the worker, validation by the company

Hours status workflow (one record per offer and worker):
    pending_validation -> validated
    pending_validation -> needs_correction -> pending_validation (resubmitted)

The offer follows along: completed_pending_validation, needs_correction,
completed_validated.
"""

import logging
import math
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...exceptions import (
    AlreadySubmittedError,
    DomainError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from ...models import User
from ...models_mission import (
    HOURS_NEEDS_CORRECTION,
    HOURS_PENDING_VALIDATION,
    HOURS_VALIDATED,
    OFFER_ACCEPTED,
    OFFER_COMPLETED_PENDING_VALIDATION,
    OFFER_COMPLETED_VALIDATED,
    OFFER_IN_PROGRESS,
    OFFER_NEEDS_CORRECTION,
    MissionHours,
)
from ...shared.datetime_utils import utc_now
from ...shared.validators import normalize_text
from .repository import OfferRepository

logger = logging.getLogger(__name__)

# Offer statuses from which the worker may (re)submit hours
SUBMITTABLE_OFFER_STATUSES = (OFFER_IN_PROGRESS, OFFER_ACCEPTED, OFFER_NEEDS_CORRECTION)

# Offer statuses while hours wait for the company's decision
REVIEWABLE_OFFER_STATUSES = (OFFER_COMPLETED_PENDING_VALIDATION, OFFER_NEEDS_CORRECTION)

REVIEWABLE_HOURS_STATUSES = (HOURS_PENDING_VALIDATION, HOURS_NEEDS_CORRECTION)

ACTION_VALIDATE = "validate"
ACTION_REJECT = "reject"


class HoursService:
    """Service layer for mission hours"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.repo = OfferRepository()
        self.clock = clock

    def submit_hours(self, offer_id: int, worker_id: int, hours_worked: float) -> MissionHours:
        """
        Record the hours a worker spent on an offer and hand them to the company.

        A record sent back for correction is resubmitted in place (its
        rejection note is cleared); any other existing record is final.

        Raises:
            InvalidInputError: hours_worked is not a positive number
            NotFoundError: Unknown offer
            ForbiddenError: The offer belongs to another worker
            InvalidStateError: The offer is not running or awaiting correction
            AlreadySubmittedError: Hours were already submitted
        """
        if isinstance(hours_worked, bool):
            raise InvalidInputError("Hours worked must be a number")
        try:
            hours_worked = float(hours_worked)
        except (TypeError, ValueError):
            raise InvalidInputError("Hours worked must be a number") from None
        if not math.isfinite(hours_worked) or hours_worked <= 0:
            raise InvalidInputError("Hours worked is required and must be greater than 0")

        try:
            offer = self.repo.get_offer(self.db, offer_id, lock=True)
            if not offer:
                raise NotFoundError("Offer not found")
            if offer.worker_id != worker_id:
                raise ForbiddenError("This offer was sent to another worker")
            if offer.status not in SUBMITTABLE_OFFER_STATUSES:
                raise InvalidStateError("Mission must be in progress to submit hours")

            existing = self.repo.get_hours_for_offer(self.db, offer.id, worker_id, lock=True)
            if existing:
                hours = existing[0]
                if hours.status != HOURS_NEEDS_CORRECTION:
                    raise AlreadySubmittedError("Hours have already been submitted for this mission")
                hours.hours_worked = hours_worked
                hours.status = HOURS_PENDING_VALIDATION
                hours.rejection_note = None
            else:
                hours = MissionHours(
                    offer_id=offer.id,
                    worker_id=worker_id,
                    hours_worked=hours_worked,
                    status=HOURS_PENDING_VALIDATION,
                )
                self.db.add(hours)

            changed = self.repo.transition_status(
                self.db, offer.id, SUBMITTABLE_OFFER_STATUSES, status=OFFER_COMPLETED_PENDING_VALIDATION
            )
            if not changed:
                raise InvalidStateError("Mission must be in progress to submit hours")

            self.db.commit()
        except DomainError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Hours submission for offer {offer_id} refused: {e.message}")
            raise

        self.db.refresh(hours)
        logger.info(f"⏱️ Worker {worker_id} submitted {hours_worked}h for offer {offer_id}")
        return hours

    def validate_hours(
        self,
        offer_id: int,
        hours_id: int,
        company_id: int,
        action: str,
        rejection_note: Optional[str] = None,
    ) -> MissionHours:
        """
        Validate or reject submitted hours.

        ``action`` is "validate" or "reject"; rejecting requires a non-blank
        note, which is stored trimmed. Nothing changes when a check fails.
        """
        try:
            hours = self.repo.get_hours(self.db, hours_id, lock=True)
            if not hours:
                raise NotFoundError("Hours not found")
            if hours.offer_id != offer_id:
                raise InvalidInputError("Hours do not belong to this offer")

            offer = self.repo.get_offer(self.db, offer_id, lock=True)
            if not offer:
                raise NotFoundError("Offer not found")
            if offer.issuer_id != company_id:
                raise ForbiddenError("Only the issuing company can review these hours")

            if hours.status not in REVIEWABLE_HOURS_STATUSES:
                raise InvalidStateError("Hours are not in a valid state for validation")

            if action == ACTION_REJECT:
                note = normalize_text(rejection_note) if rejection_note else ""
                if not note:
                    raise InvalidInputError("Rejection note is required when rejecting hours")
                hours_status, offer_status = HOURS_NEEDS_CORRECTION, OFFER_NEEDS_CORRECTION
            elif action == ACTION_VALIDATE:
                hours_status, offer_status = HOURS_VALIDATED, OFFER_COMPLETED_VALIDATED
            else:
                raise InvalidInputError("Action must be 'validate' or 'reject'")

            changed = self.repo.transition_status(
                self.db, offer.id, REVIEWABLE_OFFER_STATUSES, status=offer_status
            )
            if not changed:
                raise InvalidStateError("Offer is not awaiting hours validation")

            hours.status = hours_status
            if action == ACTION_REJECT:
                hours.rejection_note = rejection_note.strip()
            else:
                hours.validated_at = self.clock()
                hours.validated_by = company_id

            self.db.commit()
        except DomainError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Hours review {hours_id} on offer {offer_id} refused: {e.message}")
            raise

        self.db.refresh(hours)
        logger.info(f"📋 Hours {hours.id} on offer {offer_id}: {action} by company {company_id}")
        return hours

    def list_hours(self, offer_id: int, user: User) -> list[MissionHours]:
        """Hours records of an offer, visible to its issuer and its worker"""
        offer = self.repo.get_offer(self.db, offer_id)
        if not offer:
            raise NotFoundError("Offer not found")
        if user.id not in (offer.issuer_id, offer.worker_id):
            raise ForbiddenError("Not allowed to view these hours")
        return self.repo.get_hours_for_offer(self.db, offer.id)
