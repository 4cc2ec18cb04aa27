"""Customer model - a contact or business the company issues documents to."""

import uuid
from enum import Enum

from sqlalchemy import Boolean, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONType, TimestampMixin, UsageMixin, UUIDMixin


class CustomerType(str, Enum):
    """Customer type enum."""

    INDIVIDUAL = "individual"
    COMPANY = "company"


class Customer(Base, UUIDMixin, TimestampMixin, UsageMixin):
    """A customer record scoped to one company.

    The end customer project fields are a denormalized snapshot of at most one
    EndCustomer, kept for the older single-project document forms:
    {
        "project_name": "Villa A",            # Required inside the snapshot
        "project_address": "99 Moo 1 ...",    # Optional
        "contact_name": "Khun Somchai",       # Optional
    }
    The end_customers table is the source of truth once populated.
    """

    __tablename__ = "customers"
    __table_args__ = (
        Index("ix_customer_company_last_used", "company_id", "last_used_at"),
    )

    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)  # Creator

    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CustomerType.INDIVIDUAL.value
    )

    # Contact
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    alternate_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    line_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Address
    address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    district: Mapped[str | None] = mapped_column(String(100), nullable=True)
    amphoe: Mapped[str | None] = mapped_column(String(100), nullable=True)
    province: Mapped[str | None] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # Project (construction / real estate customers)
    project_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    house_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Tax
    tax_id: Mapped[str | None] = mapped_column(String(20), nullable=True)
    branch_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    branch_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    tags: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Embedded end customer snapshot
    has_end_customer_project: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    end_customer_project: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<Customer(id={self.id}, name='{self.customer_name}', phone='{self.phone}')>"
