"""Client service - Business logic for client operations"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...exceptions import InvalidStateError, NotFoundError
from ...models import Client, User
from ...services.geocoding_service import NominatimGeocoder, format_address_for_geocoding
from ...shared.datetime_utils import utc_now
from ..invoices.repository import InvoiceRepository
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("address", "city", "postal_code", "country")


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session, geocoder: Optional[NominatimGeocoder] = None):
        self.db = db
        self.repo = ClientRepository()
        self.geocoder = geocoder

    def get_clients(self, user: User) -> list[Client]:
        """Get all clients for a user"""
        return self.repo.get_clients(self.db, user.id)

    def get_client(self, client_id: int, user: User) -> Client:
        """Get a specific client"""
        client = self.repo.get_client_by_id(self.db, client_id, user.id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    async def _locate(self, client_data: dict, language: Optional[str] = None) -> dict:
        """Coordinates for an address, as column values; empty on failure"""
        if self.geocoder is None:
            return {"latitude": None, "longitude": None, "geocoded_at": None}

        query = format_address_for_geocoding(
            client_data.get("address"),
            client_data.get("postal_code"),
            client_data.get("city"),
            client_data.get("country"),
        )
        coordinate = await self.geocoder.geocode(query, client_data.get("country"), language)
        if coordinate is None:
            logger.warning(f"⚠️ Could not geocode address: {query}")
            return {"latitude": None, "longitude": None, "geocoded_at": None}

        logger.info(f"📍 Geocoded '{query}' -> ({coordinate.lat}, {coordinate.lon})")
        return {"latitude": coordinate.lat, "longitude": coordinate.lon, "geocoded_at": utc_now()}

    async def create_client(self, data: ClientCreate, user: User) -> Client:
        """Create a new client and geocode its address"""
        logger.info(f"📥 Creating client for user_id: {user.id}")

        client_data = {
            "first_name": data.firstName,
            "last_name": data.lastName or "",
            "email": data.email,
            "phone": data.phone,
            "address": data.address,
            "city": data.city,
            "postal_code": data.postalCode,
            "country": data.country or "France",
            "notes": data.notes,
            "medical_notes": data.medicalNotes,
        }
        client_data.update(await self._locate(client_data, user.language))

        return self.repo.create_client(self.db, user.id, **client_data)

    async def update_client(self, client_id: int, data: ClientUpdate, user: User) -> Client:
        """Update a client; the address is geocoded again when it changes"""
        client = self.get_client(client_id, user)

        updates = {}
        if data.firstName is not None:
            updates["first_name"] = data.firstName
        if data.lastName is not None:
            updates["last_name"] = data.lastName
        if data.email is not None:
            updates["email"] = data.email
        if data.phone is not None:
            updates["phone"] = data.phone
        if data.address is not None:
            updates["address"] = data.address
        if data.city is not None:
            updates["city"] = data.city
        if data.postalCode is not None:
            updates["postal_code"] = data.postalCode
        if data.country is not None:
            updates["country"] = data.country
        if data.notes is not None:
            updates["notes"] = data.notes
        if data.medicalNotes is not None:
            updates["medical_notes"] = data.medicalNotes
        if data.isActive is not None:
            updates["is_active"] = data.isActive

        address_changed = any(
            key in updates and updates[key] != getattr(client, key) for key in ADDRESS_FIELDS
        )
        if address_changed:
            merged = {key: updates.get(key, getattr(client, key)) for key in ADDRESS_FIELDS}
            updates.update(await self._locate(merged, user.language))

        return self.repo.update_client(self.db, client, **updates)

    async def geocode_client(self, client_id: int, user: User) -> Client:
        """Re-run geocoding for a stored client"""
        client = self.get_client(client_id, user)
        current = {key: getattr(client, key) for key in ADDRESS_FIELDS}
        return self.repo.update_client(self.db, client, **await self._locate(current, user.language))

    def delete_client(self, client_id: int, user: User) -> dict:
        """Delete a client"""
        client = self.get_client(client_id, user)
        if InvoiceRepository.client_has_invoices(self.db, client.id):
            raise InvalidStateError("Client has invoices and cannot be deleted")
        self.repo.delete_client(self.db, client)
        return {"message": "Client deleted"}
