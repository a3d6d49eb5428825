"""
Pydantic schemas for the public catalog (tenant, services, professionals)
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class TenantPublicResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    timezone: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    business_hours: Optional[Dict[str, Any]] = None


class ServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None
    price: Decimal
    duration: int
    formatted_duration: str


class ProfessionalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    avatar_url: Optional[str] = None
    service_ids: List[UUID] = []
