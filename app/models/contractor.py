"""Contractor model - crews and subcontractors hired by the company."""

import uuid
from enum import Enum

from sqlalchemy import String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONType, TimestampMixin, UsageMixin, UUIDMixin


class ContractorType(str, Enum):
    """Contractor type enum."""

    INDIVIDUAL = "individual"
    COMPANY = "company"


class Contractor(Base, UUIDMixin, TimestampMixin, UsageMixin):
    """A contractor (crew lead or contracting firm) scoped to one company."""

    __tablename__ = "contractors"

    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)

    contractor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contractor_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ContractorType.INDIVIDUAL.value
    )

    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    alternate_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    line_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    district: Mapped[str | None] = mapped_column(String(100), nullable=True)
    amphoe: Mapped[str | None] = mapped_column(String(100), nullable=True)
    province: Mapped[str | None] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(10), nullable=True)

    id_card: Mapped[str | None] = mapped_column(String(20), nullable=True)
    tax_id: Mapped[str | None] = mapped_column(String(20), nullable=True)

    specialties: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)  # e.g. ["tiling", "electrical"]
    tags: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<Contractor(id={self.id}, name='{self.contractor_name}')>"
