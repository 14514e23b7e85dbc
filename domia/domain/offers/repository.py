"""Offer repository - Database operations for job offers and mission hours"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Appointment, User, WorkerClient
from ...models_mission import ACTIVE_OFFER_STATUSES, FILLED_OFFER_STATUSES, JobOffer, MissionHours


class OfferRepository:
    """Repository for offer database operations"""

    @staticmethod
    def get_offer(db: Session, offer_id: int, lock: bool = False) -> Optional[JobOffer]:
        """Fetch an offer; ``lock`` takes a row lock for the rest of the transaction"""
        query = db.query(JobOffer).filter(JobOffer.id == offer_id)
        if lock:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def get_user(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_offers_for_worker(db: Session, worker_id: int) -> list[JobOffer]:
        return (
            db.query(JobOffer)
            .filter(JobOffer.worker_id == worker_id)
            .order_by(JobOffer.start_date.desc(), JobOffer.id.desc())
            .all()
        )

    @staticmethod
    def get_offers_for_issuer(db: Session, issuer_id: int) -> list[JobOffer]:
        return (
            db.query(JobOffer)
            .filter(JobOffer.issuer_id == issuer_id)
            .order_by(JobOffer.start_date.desc(), JobOffer.id)
            .all()
        )

    @staticmethod
    def count_filled_siblings(db: Session, offer: JobOffer) -> int:
        """
        Offers of the same mission that already hold a position.

        A mission is the set of offers sharing issuer, title, window and address.
        """
        return (
            db.query(func.count(JobOffer.id))
            .filter(
                JobOffer.issuer_id == offer.issuer_id,
                JobOffer.title == offer.title,
                JobOffer.start_date == offer.start_date,
                JobOffer.end_date == offer.end_date,
                JobOffer.address == offer.address,
                JobOffer.status.in_(FILLED_OFFER_STATUSES),
            )
            .scalar()
        )

    @staticmethod
    def get_scheduled_appointments(db: Session, user_id: int) -> list[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.user_id == user_id, Appointment.status == "scheduled")
            .all()
        )

    @staticmethod
    def get_active_offers(db: Session, worker_id: int, exclude_offer_id: int) -> list[JobOffer]:
        """The worker's other offers that still occupy their calendar"""
        return (
            db.query(JobOffer)
            .filter(
                JobOffer.worker_id == worker_id,
                JobOffer.id != exclude_offer_id,
                JobOffer.status.in_(ACTIVE_OFFER_STATUSES),
            )
            .all()
        )

    @staticmethod
    def transition_status(db: Session, offer_id: int, expected: tuple, **values) -> int:
        """
        Conditional status update; returns the number of rows changed.

        Zero means the offer left every ``expected`` status in the meantime.
        """
        return (
            db.query(JobOffer)
            .filter(JobOffer.id == offer_id, JobOffer.status.in_(expected))
            .update(values, synchronize_session="fetch")
        )

    @staticmethod
    def get_worker_client(db: Session, worker_id: int, company_id: int) -> Optional[WorkerClient]:
        return (
            db.query(WorkerClient)
            .filter(WorkerClient.worker_id == worker_id, WorkerClient.company_id == company_id)
            .first()
        )

    # Mission hours

    @staticmethod
    def get_hours(db: Session, hours_id: int, lock: bool = False) -> Optional[MissionHours]:
        query = db.query(MissionHours).filter(MissionHours.id == hours_id)
        if lock:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def get_hours_for_offer(
        db: Session, offer_id: int, worker_id: Optional[int] = None, lock: bool = False
    ) -> list[MissionHours]:
        query = db.query(MissionHours).filter(MissionHours.offer_id == offer_id)
        if worker_id is not None:
            query = query.filter(MissionHours.worker_id == worker_id)
        if lock:
            query = query.with_for_update()
        return query.order_by(MissionHours.created_at, MissionHours.id).all()

    @staticmethod
    def get_hours_for_offers(db: Session, offer_ids: list[int]) -> list[MissionHours]:
        if not offer_ids:
            return []
        return (
            db.query(MissionHours)
            .filter(MissionHours.offer_id.in_(offer_ids))
            .order_by(MissionHours.created_at, MissionHours.id)
            .all()
        )

    @staticmethod
    def get_mission_offers(
        db: Session,
        issuer_id: int,
        title: str,
        start_date: datetime,
        end_date: datetime,
        address: str,
        lock: bool = False,
    ) -> list[JobOffer]:
        """
        Every offer of one mission, in id order.

        With ``lock`` the rows are locked in id order and reloaded into the
        session, which serializes concurrent acceptances of the mission.
        """
        query = db.query(JobOffer).filter(
            JobOffer.issuer_id == issuer_id,
            JobOffer.title == title,
            JobOffer.start_date == start_date,
            JobOffer.end_date == end_date,
            JobOffer.address == address,
        )
        if lock:
            query = query.with_for_update().populate_existing()
        return query.order_by(JobOffer.id).all()
