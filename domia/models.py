from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

ACCOUNT_TYPE_COMPANY = "company"
ACCOUNT_TYPE_WORKER = "worker"


class User(Base):
    """Professional account: an independent worker or a hiring company"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    business_name = Column(String(255), nullable=True)  # Legal name for companies
    phone = Column(String(50), nullable=True)
    account_type = Column(String(20), default=ACCOUNT_TYPE_WORKER, nullable=False, index=True)
    # infirmiere, aide_soignante, agent_entretien, aide_domicile, garde_enfants
    profession = Column(String(100), nullable=True)
    hourly_rate = Column(Float, nullable=True)

    # Address
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    postal_code = Column(String(10), nullable=True)
    country = Column(String(100), default="France")
    language = Column(String(10), default="fr")

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    clients = relationship("Client", back_populates="user")
    appointments = relationship("Appointment", back_populates="user")
    tours = relationship("Tour", back_populates="user")

    @property
    def is_company(self) -> bool:
        return self.account_type == ACCOUNT_TYPE_COMPANY

    @property
    def display_name(self) -> str:
        if self.business_name:
            return self.business_name
        full_name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full_name or self.email


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Contact information
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False, default="")
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True, index=True)

    # Address
    address = Column(Text, nullable=False)
    city = Column(String(100), nullable=False)
    postal_code = Column(String(10), nullable=False)
    country = Column(String(100), default="France")
    latitude = Column(Float, nullable=True)  # Filled by geocoding
    longitude = Column(Float, nullable=True)
    geocoded_at = Column(DateTime, nullable=True)

    notes = Column(Text, nullable=True)
    medical_notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="clients")
    appointments = relationship("Appointment", back_populates="client", cascade="all, delete-orphan")

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    tour_id = Column(Integer, ForeignKey("tours.id", ondelete="SET NULL"), nullable=True)

    # Scheduling
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    duration = Column(Integer, nullable=False)  # Minutes

    service_name = Column(String(255), nullable=True)  # Snapshot of the service name
    notes = Column(Text, nullable=True)

    # scheduled, completed, cancelled, no_show
    status = Column(String(50), default="scheduled", nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    price = Column(Float, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="appointments")
    client = relationship("Client", back_populates="appointments")
    tour = relationship("Tour", back_populates="appointments")


class Tour(Base):
    """A saved, optimized round of appointments for one day"""

    __tablename__ = "tours"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=True)
    date = Column(DateTime, nullable=False, index=True)

    optimized_order = Column(JSON, nullable=True)  # Appointment ids in visiting order
    total_distance = Column(Float, nullable=True)  # km
    estimated_duration = Column(Integer, nullable=True)  # minutes

    # draft, scheduled, in_progress, completed
    status = Column(String(50), default="draft", nullable=False)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="tours")
    appointments = relationship("Appointment", back_populates="tour")


class WorkerClient(Base):
    """Link between a worker and a company that hired them through an offer"""

    __tablename__ = "worker_clients"
    __table_args__ = (UniqueConstraint("worker_id", "company_id", name="uq_worker_client"),)

    id = Column(Integer, primary_key=True, index=True)
    worker_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Client record materialized in the worker's client list
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
