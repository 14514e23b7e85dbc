"""Client repository - Database operations for clients"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Client


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def get_clients(db: Session, user_id: int, include_inactive: bool = True) -> list[Client]:
        """Get all clients for a user, active ones first"""
        query = db.query(Client).filter(Client.user_id == user_id)

        if not include_inactive:
            query = query.filter(Client.is_active.is_(True))

        return query.order_by(Client.is_active.desc(), Client.created_at.desc(), Client.id.desc()).all()

    @staticmethod
    def get_client_by_id(db: Session, client_id: int, user_id: int) -> Optional[Client]:
        """Get a specific client by ID"""
        return (
            db.query(Client)
            .filter(Client.id == client_id, Client.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_client_by_email(db: Session, user_id: int, email: str) -> Optional[Client]:
        """Find one of the user's clients by e-mail (case insensitive)"""
        return (
            db.query(Client)
            .filter(Client.user_id == user_id, func.lower(Client.email) == email.strip().lower())
            .first()
        )

    @staticmethod
    def create_client(db: Session, user_id: int, **client_data) -> Client:
        """Create a new client"""
        client = Client(user_id=user_id, **client_data)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def update_client(db: Session, client: Client, **updates) -> Client:
        """Update a client with provided fields"""
        for key, value in updates.items():
            if hasattr(client, key):
                setattr(client, key, value)

        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def delete_client(db: Session, client: Client) -> None:
        """Delete a client"""
        db.delete(client)
        db.commit()
