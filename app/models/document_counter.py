"""DocumentCounter model - per company, document type and day sequence."""

import uuid
from enum import Enum

from sqlalchemy import Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDMixin


class DocumentType(str, Enum):
    """Document types that receive sequential numbers."""

    DELIVERY = "delivery"
    WARRANTY = "warranty"
    INVOICE = "invoice"
    RECEIPT = "receipt"
    QUOTATION = "quotation"
    PURCHASE_ORDER = "purchase-order"
    MEMO = "memo"
    VARIATION_ORDER = "variation-order"
    SUBCONTRACT = "subcontract"

    @property
    def prefix(self) -> str:
        """Fixed number prefix for this type."""
        return DOCUMENT_PREFIXES[self]


DOCUMENT_PREFIXES: dict[DocumentType, str] = {
    DocumentType.DELIVERY: "DN",
    DocumentType.WARRANTY: "WR",
    DocumentType.INVOICE: "IN",
    DocumentType.RECEIPT: "RC",
    DocumentType.QUOTATION: "QT",
    DocumentType.PURCHASE_ORDER: "PO",
    DocumentType.MEMO: "MEMO",
    DocumentType.VARIATION_ORDER: "VO",
    DocumentType.SUBCONTRACT: "SC",
}


class DocumentCounter(Base, UUIDMixin, TimestampMixin):
    """Last issued sequence for (company, document type, YYMMDD).

    Rows are created lazily at 0 and only ever incremented; they are never
    deleted and double as a history of daily issue counts.
    """

    __tablename__ = "document_counters"
    __table_args__ = (
        UniqueConstraint(
            "company_id", "document_type", "day_key", name="uq_document_counter_key"
        ),
    )

    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    document_type: Mapped[str] = mapped_column(String(50), nullable=False)
    day_key: Mapped[str] = mapped_column(String(6), nullable=False)  # YYMMDD
    last_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<DocumentCounter(company_id={self.company_id}, type='{self.document_type}', "
            f"day='{self.day_key}', last={self.last_number})>"
        )
