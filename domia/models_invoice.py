"""
Invoice Models for client billing
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

INVOICE_DRAFT = "draft"
INVOICE_SENT = "sent"
INVOICE_PAID = "paid"
INVOICE_OVERDUE = "overdue"
INVOICE_CANCELLED = "cancelled"

INVOICE_STATUSES = (INVOICE_DRAFT, INVOICE_SENT, INVOICE_PAID, INVOICE_OVERDUE, INVOICE_CANCELLED)


class Invoice(Base):
    """Invoice issued by a professional to one of their clients"""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Clients with invoices cannot be deleted
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)

    invoice_number = Column(String(50), unique=True, nullable=False, index=True)

    # Dates
    issue_date = Column(DateTime, nullable=False, index=True)
    due_date = Column(DateTime, nullable=True)

    # Amounts
    subtotal = Column(Float, nullable=False)
    tax_rate = Column(Float, default=0, nullable=False)  # Percent
    tax = Column(Float, default=0, nullable=False)
    total = Column(Float, nullable=False)
    currency = Column(String(10), default="EUR")

    # draft, sent, paid, overdue, cancelled
    status = Column(String(50), default=INVOICE_DRAFT, nullable=False, index=True)
    paid_at = Column(DateTime, nullable=True)
    payment_method = Column(String(50), nullable=True)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    # Optional link to the billed appointment
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True, index=True)

    description = Column(Text, nullable=False)
    quantity = Column(Float, default=1, nullable=False)
    unit_price = Column(Float, nullable=False)
    total = Column(Float, nullable=False)

    created_at = Column(DateTime, server_default=func.now())

    invoice = relationship("Invoice", back_populates="items")
