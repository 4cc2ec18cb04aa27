"""EndCustomer model - the customer's own client (e.g. the homeowner of a project)."""

import uuid

from sqlalchemy import Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UsageMixin, UUIDMixin


class EndCustomer(Base, UUIDMixin, TimestampMixin, UsageMixin):
    """Normalized end customer project, many per Customer.

    customer_id is intentionally not a foreign key: deleting a Customer does
    not cascade, and records left behind keep their dangling customer_id.
    """

    __tablename__ = "end_customers"
    __table_args__ = (
        Index("ix_end_customer_company_customer", "company_id", "customer_id"),
    )

    customer_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)

    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    project_address: Mapped[str | None] = mapped_column(Text, nullable=True)

    contact_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<EndCustomer(id={self.id}, customer_id={self.customer_id}, "
            f"project='{self.project_name}')>"
        )
