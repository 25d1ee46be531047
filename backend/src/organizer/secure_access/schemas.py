"""Pydantic schemas for secure access endpoints"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class VendorCreate(BaseModel):
    name: str = Field(..., max_length=200)
    website: str = Field("", max_length=500)
    password: str = Field("", max_length=500)
    account_number: str = Field("", max_length=200)
    contact_phone: str = Field("", max_length=100)
    contact_email: str = Field("", max_length=320)


class VendorUpdate(BaseModel):
    """Partial update; omitted fields are left alone."""
    name: Optional[str] = Field(None, max_length=200)
    website: Optional[str] = Field(None, max_length=500)
    password: Optional[str] = Field(None, max_length=500)
    account_number: Optional[str] = Field(None, max_length=200)
    contact_phone: Optional[str] = Field(None, max_length=100)
    contact_email: Optional[str] = Field(None, max_length=320)


class VendorSummary(BaseModel):
    """Directory entry; never carries the password."""
    id: str
    name: str
    website: str
    website_domain: str
    account_number: str
    contact_phone: str
    contact_email: str
    last_updated_at: datetime
    last_updated_by: str
    created_at: datetime


class VendorDetail(VendorSummary):
    masked_password: str


class VendorListResponse(BaseModel):
    vendors: List[VendorSummary]


class VendorUpdateResponse(BaseModel):
    fields_changed: List[str]
    vendor: VendorDetail


class PasswordResponse(BaseModel):
    password: str


class VendorActivityResponse(BaseModel):
    id: UUID
    vendor_id: str
    action: str
    actor_name: str
    created_at: datetime
    fields_changed: List[str]
    note: Optional[str]

    class Config:
        from_attributes = True


class VendorActivityListResponse(BaseModel):
    events: List[VendorActivityResponse]
