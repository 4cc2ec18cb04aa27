"""EndCustomer schemas for API requests and responses."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EndCustomerBase(BaseModel):
    """Base end customer schema with common fields."""

    project_name: str = Field(..., description="End customer project name")
    project_address: str | None = Field(None)
    contact_name: str | None = Field(None, description="Contact person at the project")
    contact_phone: str | None = Field(None)
    contact_email: str | None = Field(None)
    notes: str | None = Field(None)


class EndCustomerCreate(EndCustomerBase):
    """Schema for creating a new end customer.

    customer_id is trusted as given; callers check the customer exists.
    """

    customer_id: UUID = Field(..., description="Owning customer")


class EndCustomerUpdate(BaseModel):
    """Schema for updating an end customer - all fields optional.

    customer_id and company_id are fixed at creation.
    """

    project_name: str | None = Field(None)
    project_address: str | None = Field(None)
    contact_name: str | None = Field(None)
    contact_phone: str | None = Field(None)
    contact_email: str | None = Field(None)
    notes: str | None = Field(None)


class EndCustomerResponse(EndCustomerBase):
    """Schema for end customer API responses.

    Records synthesized from a customer's embedded project have no
    timestamps until they are materialized.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    customer_id: UUID
    company_id: UUID
    user_id: str
    usage_count: int = 0
    last_used_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EndCustomerSyncResponse(BaseModel):
    """Result of migrating a customer's embedded project."""

    created: bool
    end_customer: EndCustomerResponse | None = None
