"""Client domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import require_text, validate_email, validate_phone


class ClientCreate(BaseModel):
    """Schema for creating a new client"""

    firstName: str
    lastName: Optional[str] = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    address: str
    city: str
    postalCode: str
    country: Optional[str] = "France"
    notes: Optional[str] = None
    medicalNotes: Optional[str] = None

    @field_validator("firstName")
    @classmethod
    def validate_first_name(cls, v):
        return require_text(v, "firstName")

    @field_validator("address", "city", "postalCode")
    @classmethod
    def validate_address_parts(cls, v, info):
        return require_text(v, info.field_name)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if v:
            return validate_email(v)
        return v


class ClientUpdate(BaseModel):
    """Schema for updating an existing client"""

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postalCode: Optional[str] = None
    country: Optional[str] = None
    notes: Optional[str] = None
    medicalNotes: Optional[str] = None
    isActive: Optional[bool] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if v:
            return validate_email(v)
        return v


class ClientResponse(BaseModel):
    """Schema for client response"""

    id: int
    firstName: str
    lastName: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    address: str
    city: str
    postalCode: str
    country: Optional[str]
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    geocodedAt: Optional[datetime] = None
    notes: Optional[str]
    medicalNotes: Optional[str] = None
    isActive: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
