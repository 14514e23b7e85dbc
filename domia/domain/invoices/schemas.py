"""Invoice domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models_invoice import INVOICE_STATUSES
from ...shared.datetime_utils import to_naive_utc


class InvoiceItemCreate(BaseModel):
    """One invoice line; an appointment supplies the description and price when omitted"""

    appointmentId: Optional[int] = None
    description: Optional[str] = None
    quantity: float = Field(1, gt=0)
    unitPrice: Optional[float] = Field(None, ge=0)


class InvoiceCreate(BaseModel):
    """Schema for creating an invoice"""

    clientId: int
    issueDate: Optional[datetime] = None  # Defaults to now
    dueDate: Optional[datetime] = None
    taxRate: float = Field(0, ge=0, le=100)  # Percent
    notes: Optional[str] = None
    items: list[InvoiceItemCreate] = Field(..., min_length=1)

    @field_validator("issueDate", "dueDate")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_due_date(self):
        if self.issueDate and self.dueDate and self.dueDate < self.issueDate:
            raise ValueError("dueDate cannot be before issueDate")
        return self


class InvoiceUpdate(BaseModel):
    """Schema for updating an invoice"""

    issueDate: Optional[datetime] = None
    dueDate: Optional[datetime] = None
    taxRate: Optional[float] = Field(None, ge=0, le=100)
    status: Optional[str] = None
    paidAt: Optional[datetime] = None
    paymentMethod: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("issueDate", "dueDate", "paidAt")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in INVOICE_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(INVOICE_STATUSES)}")
        return v


class InvoiceItemResponse(BaseModel):
    id: int
    appointmentId: Optional[int] = None
    description: str
    quantity: float
    unitPrice: float
    total: float


class InvoiceResponse(BaseModel):
    """Schema for invoice response"""

    id: int
    clientId: int
    clientName: Optional[str] = None
    invoiceNumber: str
    issueDate: datetime
    dueDate: Optional[datetime] = None
    subtotal: float
    taxRate: float
    tax: float
    total: float
    currency: Optional[str] = None
    status: str
    paidAt: Optional[datetime] = None
    paymentMethod: Optional[str] = None
    notes: Optional[str] = None
    items: list[InvoiceItemResponse] = []
    created_at: Optional[datetime] = None
