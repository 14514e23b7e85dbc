"""
Mission Models for the company -> worker staffing workflow
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Offer status workflow:
# pending → in_progress → completed_pending_validation → completed_validated
#                                   ↑         ↓
#                              needs_correction
# pending → declined (worker refuses) | expired (window passed, computed at read time)
OFFER_PENDING = "pending"
OFFER_ACCEPTED = "accepted"  # Legacy rows accepted before in_progress existed
OFFER_IN_PROGRESS = "in_progress"
OFFER_COMPLETED_PENDING_VALIDATION = "completed_pending_validation"
OFFER_NEEDS_CORRECTION = "needs_correction"
OFFER_COMPLETED_VALIDATED = "completed_validated"
OFFER_DECLINED = "declined"
OFFER_EXPIRED = "expired"

# Statuses that occupy one of the mission's positions
FILLED_OFFER_STATUSES = (
    OFFER_ACCEPTED,
    OFFER_IN_PROGRESS,
    OFFER_COMPLETED_PENDING_VALIDATION,
    OFFER_NEEDS_CORRECTION,
    OFFER_COMPLETED_VALIDATED,
)

# Statuses that still block the worker's calendar
ACTIVE_OFFER_STATUSES = (
    OFFER_ACCEPTED,
    OFFER_IN_PROGRESS,
    OFFER_COMPLETED_PENDING_VALIDATION,
    OFFER_NEEDS_CORRECTION,
)

HOURS_PENDING_VALIDATION = "pending_validation"
HOURS_NEEDS_CORRECTION = "needs_correction"
HOURS_VALIDATED = "validated"


class JobOffer(Base):
    """One worker's slot of a mission published by a company"""

    __tablename__ = "job_offers"
    __table_args__ = (
        Index("job_offer_worker_status_idx", "worker_id", "status"),
        Index("job_offer_issuer_status_idx", "issuer_id", "status"),
        Index("job_offer_dates_idx", "start_date", "end_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    issuer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)  # Company
    worker_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)

    address = Column(Text, nullable=False)
    city = Column(String(100), nullable=False)
    postal_code = Column(String(10), nullable=False)
    country = Column(String(100), default="France")

    service_type = Column(String(100), nullable=True)
    compensation = Column(Float, nullable=True)
    number_of_positions = Column(Integer, default=1, nullable=False)
    notes = Column(Text, nullable=True)

    status = Column(String(50), default=OFFER_PENDING, nullable=False)
    responded_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    issuer = relationship("User", foreign_keys=[issuer_id])
    worker = relationship("User", foreign_keys=[worker_id])
    hours = relationship("MissionHours", back_populates="offer", cascade="all, delete-orphan")


class MissionHours(Base):
    """Hours a worker claims for an offer, subject to company validation"""

    __tablename__ = "mission_hours"
    __table_args__ = (UniqueConstraint("offer_id", "worker_id", name="uq_mission_hours_offer_worker"),)

    id = Column(Integer, primary_key=True, index=True)
    offer_id = Column(Integer, ForeignKey("job_offers.id", ondelete="CASCADE"), nullable=False, index=True)
    worker_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    hours_worked = Column(Float, nullable=False)
    # pending_validation, needs_correction, validated
    status = Column(String(50), default=HOURS_PENDING_VALIDATION, nullable=False)
    rejection_note = Column(Text, nullable=True)  # Required when status is needs_correction
    validated_at = Column(DateTime, nullable=True)
    validated_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    offer = relationship("JobOffer", back_populates="hours")
    worker = relationship("User", foreign_keys=[worker_id])
