"""
Invoice service - Billing a client for appointments and other services

Amounts are always derived from the lines: each line total is
quantity x unit price, the subtotal is their sum, and the tax is a
percentage of the subtotal. Every amount is rounded to cents.
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from sqlalchemy.orm import Session

from ...exceptions import InvalidInputError, NotFoundError
from ...models import User
from ...models_invoice import INVOICE_PAID, Invoice, InvoiceItem
from ...shared.datetime_utils import utc_now
from ...shared.validators import normalize_text
from ..appointments.repository import AppointmentRepository
from .repository import InvoiceRepository
from .schemas import InvoiceCreate, InvoiceItemCreate, InvoiceUpdate

logger = logging.getLogger(__name__)


def calculate_invoice_totals(
    lines: Iterable[tuple[float, float]], tax_rate: float = 0
) -> tuple[float, float, float]:
    """(subtotal, tax, total) for ``(quantity, unit_price)`` lines and a tax rate in percent"""
    subtotal = round(sum(quantity * unit_price for quantity, unit_price in lines), 2)
    tax = round(subtotal * tax_rate / 100, 2)
    return subtotal, tax, round(subtotal + tax, 2)


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.repo = InvoiceRepository()
        self.clock = clock

    def get_invoices(
        self, user: User, client_id: Optional[int] = None, status: Optional[str] = None
    ) -> list[Invoice]:
        return self.repo.get_invoices(self.db, user.id, client_id, status)

    def get_invoice(self, invoice_id: int, user: User) -> Invoice:
        invoice = self.repo.get_invoice_by_id(self.db, invoice_id, user.id)
        if not invoice:
            raise NotFoundError("Invoice not found")
        return invoice

    def _next_invoice_number(self, user_id: int) -> str:
        """INV-<user>-<sequence>, continuing from the user's latest invoice"""
        sequence = 1
        last_invoice = self.repo.get_last_invoice(self.db, user_id)
        if last_invoice and last_invoice.invoice_number:
            try:
                sequence = int(last_invoice.invoice_number.split("-")[-1]) + 1
            except (ValueError, IndexError):
                sequence = last_invoice.id + 1
        return f"INV-{user_id}-{sequence:05d}"

    def _build_item(self, line: InvoiceItemCreate, user: User, client_id: int) -> InvoiceItem:
        description = normalize_text(line.description)
        unit_price = line.unitPrice

        if line.appointmentId is not None:
            appointment = AppointmentRepository.get_appointment_by_id(self.db, line.appointmentId, user.id)
            if not appointment:
                raise NotFoundError("Appointment not found")
            if appointment.client_id != client_id:
                raise InvalidInputError("Appointment belongs to another client")
            if not description:
                description = appointment.service_name or f"Appointment of {appointment.start_time:%d/%m/%Y}"
            if unit_price is None:
                unit_price = appointment.price

        if not description:
            raise InvalidInputError("Each invoice line needs a description")
        if unit_price is None:
            raise InvalidInputError("Each invoice line needs a unit price")

        return InvoiceItem(
            appointment_id=line.appointmentId,
            description=description,
            quantity=line.quantity,
            unit_price=unit_price,
            total=round(line.quantity * unit_price, 2),
        )

    def create_invoice(self, data: InvoiceCreate, user: User) -> Invoice:
        """Create an invoice for one of the user's clients"""
        client = AppointmentRepository.get_client(self.db, data.clientId, user.id)
        if not client:
            raise NotFoundError("Client not found")

        items = [self._build_item(line, user, client.id) for line in data.items]
        subtotal, tax, total = calculate_invoice_totals(
            [(item.quantity, item.unit_price) for item in items], data.taxRate
        )

        invoice = Invoice(
            user_id=user.id,
            client_id=client.id,
            invoice_number=self._next_invoice_number(user.id),
            issue_date=data.issueDate or self.clock(),
            due_date=data.dueDate,
            subtotal=subtotal,
            tax_rate=data.taxRate,
            tax=tax,
            total=total,
            notes=data.notes,
            items=items,
        )
        invoice = self.repo.create_invoice(self.db, invoice)
        logger.info(f"🧾 Invoice {invoice.invoice_number} created for client {client.id}: {total:.2f}")
        return invoice

    def update_invoice(self, invoice_id: int, data: InvoiceUpdate, user: User) -> Invoice:
        """Update dates, tax rate, notes or status; marking as paid stamps paid_at"""
        invoice = self.get_invoice(invoice_id, user)

        updates = {}
        if data.issueDate is not None:
            updates["issue_date"] = data.issueDate
        if data.dueDate is not None:
            updates["due_date"] = data.dueDate
        if data.notes is not None:
            updates["notes"] = data.notes

        issue_date = updates.get("issue_date", invoice.issue_date)
        due_date = updates.get("due_date", invoice.due_date)
        if due_date is not None and due_date < issue_date:
            raise InvalidInputError("Due date cannot be before issue date")

        if data.taxRate is not None:
            _, tax, total = calculate_invoice_totals([(1, invoice.subtotal)], data.taxRate)
            updates.update(tax_rate=data.taxRate, tax=tax, total=total)

        if data.status is not None:
            updates["status"] = data.status
            if data.status == INVOICE_PAID:
                updates["paid_at"] = data.paidAt or self.clock()
                updates["payment_method"] = data.paymentMethod

        if "status" in updates and updates["status"] != invoice.status:
            logger.info(f"🔄 Invoice {invoice.invoice_number}: {invoice.status} -> {updates['status']}")
        return self.repo.update_invoice(self.db, invoice, **updates)

    def delete_invoice(self, invoice_id: int, user: User) -> dict:
        invoice = self.get_invoice(invoice_id, user)
        self.repo.delete_invoice(self.db, invoice)
        return {"message": "Invoice deleted"}
