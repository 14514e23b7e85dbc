from datetime import timedelta

import pytest

from conftest import NOW
from domia.domain.invoices.schemas import InvoiceCreate, InvoiceItemCreate, InvoiceUpdate
from domia.domain.invoices.service import InvoiceService, calculate_invoice_totals
from domia.exceptions import InvalidInputError, NotFoundError
from domia.models_invoice import INVOICE_PAID, Invoice


@pytest.fixture
def invoice_service(db):
    return InvoiceService(db, clock=lambda: NOW)


def test_totals_are_rounded_to_cents():
    assert calculate_invoice_totals([(3, 19.99), (0.5, 45)], 5.5) == (82.47, 4.54, 87.01)
    assert calculate_invoice_totals([], 20) == (0, 0, 0)


def test_issue_date_defaults_to_now(invoice_service, worker, make_client):
    customer = make_client(worker)
    invoice = invoice_service.create_invoice(
        InvoiceCreate(clientId=customer.id, items=[InvoiceItemCreate(description="Soins", unitPrice=12)]),
        worker,
    )
    assert invoice.issue_date == NOW
    assert invoice.paid_at is None


def test_sequence_continues_after_deletion(db, invoice_service, worker, make_client):
    customer = make_client(worker)

    def _create():
        return invoice_service.create_invoice(
            InvoiceCreate(clientId=customer.id, items=[InvoiceItemCreate(description="Soins", unitPrice=10)]),
            worker,
        )

    first, second = _create(), _create()
    invoice_service.delete_invoice(first.id, worker)

    assert second.invoice_number.endswith("-00002")
    assert _create().invoice_number == f"INV-{worker.id}-00003"
    assert db.query(Invoice).count() == 2


def test_paid_keeps_the_given_payment_date(invoice_service, worker, make_client):
    customer = make_client(worker)
    invoice = invoice_service.create_invoice(
        InvoiceCreate(clientId=customer.id, items=[InvoiceItemCreate(description="Soins", unitPrice=10)]),
        worker,
    )
    paid_on = NOW - timedelta(days=2)

    updated = invoice_service.update_invoice(
        invoice.id, InvoiceUpdate(status=INVOICE_PAID, paidAt=paid_on, paymentMethod="cheque"), worker
    )

    assert updated.paid_at == paid_on
    assert updated.payment_method == "cheque"


def test_due_date_cannot_precede_issue_date(invoice_service, worker, make_client):
    customer = make_client(worker)
    invoice = invoice_service.create_invoice(
        InvoiceCreate(clientId=customer.id, items=[InvoiceItemCreate(description="Soins", unitPrice=10)]),
        worker,
    )
    with pytest.raises(InvalidInputError):
        invoice_service.update_invoice(invoice.id, InvoiceUpdate(dueDate=NOW - timedelta(days=1)), worker)


def test_unknown_appointment_is_not_found(invoice_service, worker, make_client):
    customer = make_client(worker)
    with pytest.raises(NotFoundError):
        invoice_service.create_invoice(
            InvoiceCreate(clientId=customer.id, items=[InvoiceItemCreate(appointmentId=999)]), worker
        )
