"""Contractor schemas for API requests and responses."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.contractor import ContractorType


class ContractorBase(BaseModel):
    """Base contractor schema with common fields."""

    contractor_name: str = Field(..., description="Crew lead or firm name")
    contractor_type: ContractorType = Field(ContractorType.INDIVIDUAL)
    phone: str = Field(...)
    alternate_phone: str | None = Field(None)
    email: str | None = Field(None)
    line_id: str | None = Field(None)
    address: str = Field("")
    district: str | None = Field(None)
    amphoe: str | None = Field(None)
    province: str | None = Field(None)
    postal_code: str | None = Field(None)
    id_card: str | None = Field(None)
    tax_id: str | None = Field(None)
    specialties: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    notes: str | None = Field(None)


class ContractorCreate(ContractorBase):
    """Schema for creating a new contractor."""


class ContractorUpdate(BaseModel):
    """Schema for updating a contractor - all fields optional."""

    contractor_name: str | None = Field(None)
    contractor_type: ContractorType | None = Field(None)
    phone: str | None = Field(None)
    alternate_phone: str | None = Field(None)
    email: str | None = Field(None)
    line_id: str | None = Field(None)
    address: str | None = Field(None)
    district: str | None = Field(None)
    amphoe: str | None = Field(None)
    province: str | None = Field(None)
    postal_code: str | None = Field(None)
    id_card: str | None = Field(None)
    tax_id: str | None = Field(None)
    specialties: list[str] | None = Field(None)
    tags: list[str] | None = Field(None)
    notes: str | None = Field(None)


class ContractorResponse(ContractorBase):
    """Schema for contractor API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    user_id: str
    usage_count: int
    last_used_at: datetime | None
    created_at: datetime
    updated_at: datetime
