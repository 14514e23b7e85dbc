"""Client router - FastAPI endpoints for client operations"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Client, User
from ...services.geocoding_service import NominatimGeocoder, get_geocoder
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])


def get_client_service(
    db: Session = Depends(get_db), geocoder: NominatimGeocoder = Depends(get_geocoder)
) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db, geocoder)


def _to_response(c: Client) -> ClientResponse:
    return ClientResponse(
        id=c.id,
        firstName=c.first_name,
        lastName=c.last_name,
        email=c.email,
        phone=c.phone,
        address=c.address,
        city=c.city,
        postalCode=c.postal_code,
        country=c.country,
        latitude=c.latitude,
        longitude=c.longitude,
        geocodedAt=c.geocoded_at,
        notes=c.notes,
        medicalNotes=c.medical_notes,
        isActive=c.is_active,
        created_at=c.created_at,
    )


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[ClientResponse])
async def get_clients(
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Get all clients for the current user (active clients first)"""
    return [_to_response(c) for c in service.get_clients(current_user)]


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Get a specific client"""
    return _to_response(service.get_client(client_id, current_user))


@router.post("", response_model=ClientResponse)
async def create_client(
    data: ClientCreate,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Create a new client (its address is geocoded)"""
    client = await service.create_client(data, current_user)
    return _to_response(client)


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Update a client"""
    client = await service.update_client(client_id, data, current_user)
    return _to_response(client)


@router.post("/{client_id}/geocode", response_model=ClientResponse)
async def geocode_client(
    client_id: int,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Look up the client's coordinates again"""
    client = await service.geocode_client(client_id, current_user)
    return _to_response(client)


@router.delete("/{client_id}")
async def delete_client(
    client_id: int,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Delete a client"""
    return service.delete_client(client_id, current_user)
