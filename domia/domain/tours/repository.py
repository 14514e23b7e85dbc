"""Tour repository - Database operations for tours and route inputs"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, Tour


class TourRepository:
    """Repository for tour database operations"""

    @staticmethod
    def get_appointments_with_clients(
        db: Session, appointment_ids: list[int], user_id: int
    ) -> list[Appointment]:
        """Fetch the user's appointments among ``appointment_ids`` with their client loaded"""
        if not appointment_ids:
            return []
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.client))
            .filter(Appointment.id.in_(appointment_ids), Appointment.user_id == user_id)
            .all()
        )

    @staticmethod
    def get_tours(
        db: Session,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Tour]:
        query = db.query(Tour).filter(Tour.user_id == user_id)
        if start is not None:
            query = query.filter(Tour.date >= start)
        if end is not None:
            query = query.filter(Tour.date < end)
        return query.order_by(Tour.date).all()

    @staticmethod
    def get_tour_by_id(db: Session, tour_id: int, user_id: int) -> Optional[Tour]:
        return db.query(Tour).filter(Tour.id == tour_id, Tour.user_id == user_id).first()

    @staticmethod
    def create_tour(db: Session, user_id: int, **tour_data) -> Tour:
        tour = Tour(user_id=user_id, **tour_data)
        db.add(tour)
        db.commit()
        db.refresh(tour)
        return tour

    @staticmethod
    def update_tour(db: Session, tour: Tour, **updates) -> Tour:
        for key, value in updates.items():
            if hasattr(tour, key):
                setattr(tour, key, value)

        db.commit()
        db.refresh(tour)
        return tour

    @staticmethod
    def delete_tour(db: Session, tour: Tour) -> None:
        db.delete(tour)
        db.commit()
