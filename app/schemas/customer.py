"""Customer schemas for API requests and responses."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.customer import CustomerType


class EndCustomerProject(BaseModel):
    """Snapshot of one end customer project embedded in a Customer.

    Value type with no identity, copied into documents at save time.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="End customer project name")
    project_address: str | None = Field(None)
    contact_name: str | None = Field(None)

    def to_embedded(self) -> dict:
        """Dict for the JSON column, without empty keys."""
        return self.model_dump(exclude_none=True)


class CustomerBase(BaseModel):
    """Base customer schema with common fields."""

    customer_name: str = Field(..., description="Customer or company name")
    customer_type: CustomerType = Field(CustomerType.INDIVIDUAL)
    phone: str = Field(..., description="Primary phone number")
    alternate_phone: str | None = Field(None)
    email: str | None = Field(None)
    line_id: str | None = Field(None)
    address: str = Field("", description="Primary address")
    district: str | None = Field(None)
    amphoe: str | None = Field(None)
    province: str | None = Field(None)
    postal_code: str | None = Field(None)
    project_name: str | None = Field(None)
    house_number: str | None = Field(None)
    tax_id: str | None = Field(None)
    branch_code: str | None = Field(None, description="Head office is 00000")
    branch_name: str | None = Field(None)
    tags: list[str] = Field(default_factory=list)
    notes: str | None = Field(None)
    has_end_customer_project: bool = Field(False)
    end_customer_project: EndCustomerProject | None = Field(None)


class CustomerCreate(CustomerBase):
    """Schema for creating a new customer.

    customer_name and phone must be non-blank; the registry rejects them otherwise.
    """


class CustomerUpdate(BaseModel):
    """Schema for updating a customer - all fields optional.

    company_id and user_id are fixed at creation and cannot be updated.
    """

    customer_name: str | None = Field(None)
    customer_type: CustomerType | None = Field(None)
    phone: str | None = Field(None)
    alternate_phone: str | None = Field(None)
    email: str | None = Field(None)
    line_id: str | None = Field(None)
    address: str | None = Field(None)
    district: str | None = Field(None)
    amphoe: str | None = Field(None)
    province: str | None = Field(None)
    postal_code: str | None = Field(None)
    project_name: str | None = Field(None)
    house_number: str | None = Field(None)
    tax_id: str | None = Field(None)
    branch_code: str | None = Field(None)
    branch_name: str | None = Field(None)
    tags: list[str] | None = Field(None)
    notes: str | None = Field(None)
    has_end_customer_project: bool | None = Field(None)
    end_customer_project: EndCustomerProject | None = Field(None)


class CustomerResponse(CustomerBase):
    """Schema for customer API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    user_id: str
    usage_count: int
    last_used_at: datetime | None
    created_at: datetime
    updated_at: datetime
