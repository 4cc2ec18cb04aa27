"""SQLAlchemy models for Docuform."""

from app.models.base import Base, TimestampMixin, UsageMixin, UUIDMixin
from app.models.contractor import Contractor, ContractorType
from app.models.customer import Customer, CustomerType
from app.models.document_counter import DOCUMENT_PREFIXES, DocumentCounter, DocumentType
from app.models.end_customer import EndCustomer

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "UsageMixin",
    # Models
    "Customer",
    "EndCustomer",
    "Contractor",
    "DocumentCounter",
    # Enums
    "CustomerType",
    "ContractorType",
    "DocumentType",
    "DOCUMENT_PREFIXES",
]
