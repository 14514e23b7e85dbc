"""Invoice router - FastAPI endpoints for client invoices"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...models_invoice import Invoice
from .schemas import InvoiceCreate, InvoiceItemResponse, InvoiceResponse, InvoiceUpdate
from .service import InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db)


def _to_response(invoice: Invoice) -> InvoiceResponse:
    client_name = None
    if invoice.client is not None:
        client_name = " ".join(p for p in (invoice.client.first_name, invoice.client.last_name) if p)
    return InvoiceResponse(
        id=invoice.id,
        clientId=invoice.client_id,
        clientName=client_name,
        invoiceNumber=invoice.invoice_number,
        issueDate=invoice.issue_date,
        dueDate=invoice.due_date,
        subtotal=invoice.subtotal,
        taxRate=invoice.tax_rate,
        tax=invoice.tax,
        total=invoice.total,
        currency=invoice.currency,
        status=invoice.status,
        paidAt=invoice.paid_at,
        paymentMethod=invoice.payment_method,
        notes=invoice.notes,
        items=[
            InvoiceItemResponse(
                id=item.id,
                appointmentId=item.appointment_id,
                description=item.description,
                quantity=item.quantity,
                unitPrice=item.unit_price,
                total=item.total,
            )
            for item in invoice.items
        ],
        created_at=invoice.created_at,
    )


@router.get("", response_model=list[InvoiceResponse])
async def get_invoices(
    clientId: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """List invoices, optionally for one client and/or one status"""
    return [_to_response(i) for i in service.get_invoices(current_user, clientId, status)]


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return _to_response(service.get_invoice(invoice_id, current_user))


@router.post("", response_model=InvoiceResponse, status_code=201)
async def create_invoice(
    data: InvoiceCreate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Create an invoice; lines linked to an appointment default to its price"""
    return _to_response(service.create_invoice(data, current_user))


@router.patch("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: int,
    data: InvoiceUpdate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return _to_response(service.update_invoice(invoice_id, data, current_user))


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.delete_invoice(invoice_id, current_user)
