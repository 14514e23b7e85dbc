"""Invoice repository - Database operations for invoices"""

from typing import Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from ...models_invoice import Invoice


class InvoiceRepository:
    """Repository for invoice database operations"""

    @staticmethod
    def get_invoices(
        db: Session, user_id: int, client_id: Optional[int] = None, status: Optional[str] = None
    ) -> list[Invoice]:
        """Get a user's invoices, most recently issued first"""
        query = db.query(Invoice).filter(Invoice.user_id == user_id)

        if client_id is not None:
            query = query.filter(Invoice.client_id == client_id)
        if status:
            query = query.filter(Invoice.status == status)

        return query.order_by(desc(Invoice.issue_date), desc(Invoice.id)).all()

    @staticmethod
    def get_invoice_by_id(db: Session, invoice_id: int, user_id: int) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.id == invoice_id, Invoice.user_id == user_id).first()

    @staticmethod
    def get_last_invoice(db: Session, user_id: int) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.user_id == user_id).order_by(desc(Invoice.id)).first()

    @staticmethod
    def client_has_invoices(db: Session, client_id: int) -> bool:
        return db.query(Invoice.id).filter(Invoice.client_id == client_id).first() is not None

    @staticmethod
    def create_invoice(db: Session, invoice: Invoice) -> Invoice:
        db.add(invoice)
        db.commit()
        db.refresh(invoice)
        return invoice

    @staticmethod
    def update_invoice(db: Session, invoice: Invoice, **updates) -> Invoice:
        """Update an invoice with provided fields"""
        for key, value in updates.items():
            if hasattr(invoice, key):
                setattr(invoice, key, value)

        db.commit()
        db.refresh(invoice)
        return invoice

    @staticmethod
    def delete_invoice(db: Session, invoice: Invoice) -> None:
        db.delete(invoice)
        db.commit()
